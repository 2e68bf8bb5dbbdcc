import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from familyspace.database import Base, engine
from familyspace.config import settings

# Import models so SQLAlchemy registers tables
from familyspace.models import (  # noqa: F401
    user,
    family_space,
    membership,
    person,
    relationship,
    claim_request,
    join_request,
)

# Routers
from familyspace.routers import (
    auth_router,
    spaces_router,
    people_router,
    relationships_router,
    tree_router,
    claims_router,
)

# -----------------------
# LOGGING
# -----------------------
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("familyspace")

# -----------------------
# CREATE APP
# -----------------------
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Backend API for collaborative family trees.",
    version="1.0.0",
)

# -----------------------
# CORS
# -----------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -----------------------
# DATABASE TABLES
# -----------------------
Base.metadata.create_all(bind=engine)
logger.info("database ready (%s)", engine.url.render_as_string(hide_password=True))

# -----------------------
# ROUTES
# -----------------------
app.include_router(auth_router.router)
app.include_router(spaces_router.router)
app.include_router(people_router.router)
app.include_router(relationships_router.router)
app.include_router(tree_router.router)
app.include_router(claims_router.router)


# -----------------------
# HEALTH CHECK
# -----------------------
@app.get("/")
def root():
    return {"message": "Family Space API is running!"}
