"""SmartQuiz backend: quizzes, timed attempts and leaderboards over a REST API."""
