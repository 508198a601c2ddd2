"""One-time DB setup: create tables and seed demo accounts and quizzes."""
from smartquiz.db.session import Base, get_engine, get_session_factory
from smartquiz.db.models import DifficultyEnum, Quiz, RoleEnum, User
from smartquiz.core.security import hash_password

SAMPLE_QUIZZES = [
    {
        "title": "World Capitals",
        "description": "Match each country with its capital city.",
        "category": "Geography",
        "difficulty": DifficultyEnum.EASY,
        "time_limit": 5,
        "tags": ["geography", "capitals"],
        "questions": [
            {
                "question_text": "What is the capital of Japan?",
                "options": ["Osaka", "Kyoto", "Tokyo", "Nagoya"],
                "correct_answer": 2,
                "explanation": "Tokyo has been the capital since 1868.",
                "points": 1,
                "time_limit": 30,
            },
            {
                "question_text": "What is the capital of Canada?",
                "options": ["Toronto", "Ottawa", "Vancouver", "Montreal"],
                "correct_answer": 1,
                "explanation": "Ottawa was chosen by Queen Victoria in 1857.",
                "points": 1,
                "time_limit": 30,
            },
            {
                "question_text": "What is the capital of Australia?",
                "options": ["Sydney", "Melbourne", "Canberra", "Perth"],
                "correct_answer": 2,
                "explanation": "Canberra was purpose-built as a compromise between Sydney and Melbourne.",
                "points": 2,
                "time_limit": 30,
            },
        ],
    },
    {
        "title": "Python Basics",
        "description": "Core language questions for new Python programmers.",
        "category": "Programming",
        "difficulty": DifficultyEnum.MEDIUM,
        "time_limit": 10,
        "tags": ["python", "programming"],
        "questions": [
            {
                "question_text": "Which keyword defines a function?",
                "options": ["func", "def", "lambda", "fn"],
                "correct_answer": 1,
                "explanation": "`def` introduces a function definition.",
                "points": 1,
                "time_limit": 20,
            },
            {
                "question_text": "What does len([1, 2, 3]) return?",
                "options": ["2", "3", "4"],
                "correct_answer": 1,
                "points": 1,
                "time_limit": 20,
            },
            {
                "question_text": "Which of these is immutable?",
                "options": ["list", "dict", "set", "tuple"],
                "correct_answer": 3,
                "explanation": "Tuples cannot be changed after creation.",
                "points": 2,
                "time_limit": 30,
            },
        ],
    },
    {
        "title": "Physics Fundamentals",
        "description": "Units, laws and constants every student should know.",
        "category": "Science",
        "difficulty": DifficultyEnum.HARD,
        "time_limit": 15,
        "tags": ["physics", "science"],
        "questions": [
            {
                "question_text": "What is the SI unit of force?",
                "options": ["Joule", "Newton", "Pascal", "Watt"],
                "correct_answer": 1,
                "points": 2,
                "time_limit": 30,
            },
            {
                "question_text": "Approximately how fast does light travel in a vacuum?",
                "options": ["300,000 km/s", "150,000 km/s", "30,000 km/s", "3,000 km/s"],
                "correct_answer": 0,
                "explanation": "c is 299,792,458 m/s.",
                "points": 3,
                "time_limit": 45,
            },
        ],
    },
]

# 1. Create all tables
engine = get_engine()
Base.metadata.create_all(bind=engine)
print("✅ All tables created")

session_factory = get_session_factory()
with session_factory() as db:
    # 2. Admin user (owns the sample quizzes)
    admin = db.query(User).filter(User.email == "admin@example.com").first()
    if not admin:
        admin = User(
            username="admin",
            email="admin@example.com",
            hashed_password=hash_password("admin123"),
            role=RoleEnum.ADMIN,
            badges=[],
        )
        db.add(admin)
        db.commit()
        db.refresh(admin)
        print("✅ Created admin: admin@example.com / admin123")
    else:
        print("  Admin user already exists")

    # 3. Demo player
    player = db.query(User).filter(User.email == "player@example.com").first()
    if not player:
        player = User(
            username="player",
            email="player@example.com",
            hashed_password=hash_password("player123"),
            role=RoleEnum.PLAYER,
            badges=[],
        )
        db.add(player)
        db.commit()
        print("✅ Created player: player@example.com / player123")
    else:
        print("  Player user already exists")

    # 4. Published sample quizzes
    for sample in SAMPLE_QUIZZES:
        if db.query(Quiz).filter(Quiz.title == sample["title"]).first():
            print(f"  Quiz '{sample['title']}' already exists")
            continue
        db.add(Quiz(author_id=admin.id, is_published=True, is_public=True, **sample))
        db.commit()
        print(f"✅ Created quiz '{sample['title']}' ({len(sample['questions'])} questions)")

print("\n🎉 Database is ready to use!")
print("   Admin:  admin@example.com  / admin123")
print("   Player: player@example.com / player123")
