from sqlalchemy.orm import Session
from app.db.models.skill import Skill

SKILL_DEFINITIONS = [
    {"slug": "python", "name": "Python"},
    {"slug": "go", "name": "Go"},
    {"slug": "rust", "name": "Rust"},
    {"slug": "typescript", "name": "TypeScript"},
    {"slug": "react", "name": "React"},
    {"slug": "system-design", "name": "System Design"},
    {"slug": "cloud-architecture", "name": "Cloud Architecture"},
    {"slug": "machine-learning", "name": "Machine Learning"},
    {"slug": "career-growth", "name": "Career Growth"},
    {"slug": "public-speaking", "name": "Public Speaking"},
]

def init_skills(db: Session) -> int:
    """Ensures the base catalog exists in DB. Returns how many skills were added."""
    # Fetch all existing slugs in a single query to avoid N+1.
    existing_slugs = {slug for slug, in db.query(Skill.slug).all()}

    added = 0
    for s_def in SKILL_DEFINITIONS:
        if s_def["slug"] not in existing_slugs:
            db.add(Skill(slug=s_def["slug"], name=s_def["name"]))
            added += 1
    db.commit()
    return added
