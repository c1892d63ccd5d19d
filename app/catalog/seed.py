"""
Demo catalog: three levels of everyday vocabulary in en/fr (ar for level 1),
with a small multiple-choice quiz per level.

Used by scripts/seed_catalog.py and by the test-suite. Safe to call twice:
it does nothing when level words already exist.
"""
from sqlalchemy.orm import Session

from app.catalog.models import LevelWord, Translation, QuizQuestion

LEVEL_WORDS = {
    1: [
        ("apple", "food"), ("bread", "food"), ("water", "food"), ("milk", "food"),
        ("cat", "animals"), ("dog", "animals"), ("bird", "animals"), ("fish", "animals"),
        ("red", "colors"), ("blue", "colors"), ("green", "colors"), ("sun", "nature"),
    ],
    2: [
        ("house", "home"), ("door", "home"), ("window", "home"), ("table", "home"),
        ("chair", "home"), ("book", "school"), ("pen", "school"), ("teacher", "school"),
        ("friend", "people"), ("family", "people"),
    ],
    3: [
        ("train", "travel"), ("airport", "travel"), ("ticket", "travel"),
    ],
}

FRENCH = {
    "apple": "pomme", "bread": "pain", "water": "eau", "milk": "lait",
    "cat": "chat", "dog": "chien", "bird": "oiseau", "fish": "poisson",
    "red": "rouge", "blue": "bleu", "green": "vert", "sun": "soleil",
    "house": "maison", "door": "porte", "window": "fenêtre", "table": "table",
    "chair": "chaise", "book": "livre", "pen": "stylo", "teacher": "professeur",
    "friend": "ami", "family": "famille",
    "train": "train", "airport": "aéroport", "ticket": "billet",
}

ARABIC = {
    "apple": "تفاحة", "bread": "خبز", "water": "ماء", "milk": "حليب",
    "cat": "قطة", "dog": "كلب", "bird": "طائر", "fish": "سمكة",
    "red": "أحمر", "blue": "أزرق", "green": "أخضر", "sun": "شمس",
}

# (level, french word asked about, correct english answer, options)
QUESTIONS = [
    (1, "chat", "cat", ["dog", "cat", "bird"]),
    (1, "pain", "bread", ["bread", "milk", "water"]),
    (1, "rouge", "red", ["blue", "green", "red"]),
    (1, "poisson", "fish", ["fish", "bird", "cat"]),
    (1, "soleil", "sun", ["apple", "sun", "water"]),
    (1, "lait", "milk", ["milk", "bread", "apple"]),
    (2, "maison", "house", ["door", "house", "table"]),
    (2, "livre", "book", ["book", "pen", "chair"]),
    (2, "ami", "friend", ["family", "teacher", "friend"]),
    (2, "fenêtre", "window", ["window", "door", "house"]),
    (2, "stylo", "pen", ["pen", "book", "table"]),
    (3, "billet", "ticket", ["train", "ticket", "airport"]),
    (3, "aéroport", "airport", ["airport", "ticket", "train"]),
]


def seed_demo_catalog(db: Session) -> dict:
    if db.query(LevelWord).first() is not None:
        print("[SEED] catalog already present, skipped", flush=True)
        return {"words": 0, "translations": 0, "questions": 0}

    words = translations = questions = 0

    for level_number, entries in LEVEL_WORDS.items():
        for order, (word_key, category) in enumerate(entries, start=1):
            db.add(LevelWord(
                level_number=level_number,
                word_key=word_key,
                category=category,
                display_order=order,
            ))
            words += 1

            texts = {"en": word_key, "fr": FRENCH.get(word_key)}
            if word_key in ARABIC:
                texts["ar"] = ARABIC[word_key]
            for language_code, text in texts.items():
                if not text:
                    continue
                db.add(Translation(
                    word_key=word_key,
                    language_code=language_code,
                    text=text,
                    gif_url=f"/media/{word_key}.gif",
                    audio_url=f"/media/{word_key}_{language_code}.mp3",
                ))
                translations += 1

    for level_number, asked, correct, options in QUESTIONS:
        q = QuizQuestion(
            level_number=level_number,
            question_type="multiple_choice",
            question_text=f"What is '{asked}' in English?",
            correct_answer=correct,
            explanation=f"'{asked}' translates to '{correct}'.",
        )
        q.options = options
        db.add(q)
        questions += 1

    db.commit()
    print(f"[SEED] catalog seeded words={words} translations={translations} questions={questions}", flush=True)
    return {"words": words, "translations": translations, "questions": questions}
