"""QuizArena quiz platform backend."""
