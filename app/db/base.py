# Importa a Base declarativa
from app.db.declarative import Base

# --- IMPORTAÇÃO DE TODOS OS MODELOS ---
# Every model must be imported here so create_all() and the relationship
# resolver see all tables before the database is initialised.

from app.db.models.skill import Skill, user_mentor_skills, user_mentee_skills
from app.db.models.user import User
from app.db.models.suggestion import Suggestion
from app.db.models.mentorship import Mentorship
from app.db.models.conversation import Conversation, Message
from app.db.models.job import BackgroundJob
