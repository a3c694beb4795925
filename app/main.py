import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError
from dotenv import load_dotenv
import sentry_sdk

# 1. Carregar .env e Configurar Logs
load_dotenv()

from app.core.config import settings

# Structured Logging Configuration
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger(__name__)

# Initialize Sentry (if DSN provided)
if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        traces_sample_rate=1.0,
        environment=settings.ENVIRONMENT,
    )

from app.db.base import Base
from app.db.session import engine, SessionLocal
from app.services.skill_catalog import init_skills
from app.core.errors import MatchingError
from app.routes import skills, onboarding, matching, mentorships, conversations

# 2. Lifespan (Conexão com Banco)
@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        logger.info("Criando tabelas no banco de dados...")
        Base.metadata.create_all(bind=engine)
        logger.info("Banco de dados pronto!")

        # Initialize Skill Catalog
        db = SessionLocal()
        try:
            added = init_skills(db)
            logger.info(f"Catalogo de skills inicializado ({added} novas).")
        finally:
            db.close()
    except Exception as e:
        logger.error(f"ERRO CRITICO NO BANCO: {e}")
        # Não queremos que o app inicie se o banco falhar
        raise e
    yield
    logger.info("Desligando...")

# 3. Inicialização do App
app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

# 4. Exception Handlers
@app.exception_handler(MatchingError)
async def matching_error_handler(request: Request, exc: MatchingError):
    logger.info(f"{request.method} {request.url.path} -> {exc.kind}: {exc.reason}")
    return JSONResponse({"error": exc.kind, "detail": exc.reason}, status_code=exc.status_code)

@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError):
    # Never leak storage details to the client
    logger.error(f"Storage error on {request.method} {request.url.path}: {exc}")
    return JSONResponse({"error": "storage_error", "detail": "Internal storage error"}, status_code=500)

# 5. Middlewares
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 6. Rotas
app.include_router(skills.router)
app.include_router(onboarding.router)
app.include_router(matching.router)
app.include_router(mentorships.router)
app.include_router(conversations.router)

@app.get("/health")
def health():
    return {"status": "ok", "app": settings.APP_NAME}
