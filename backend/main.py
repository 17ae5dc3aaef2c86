import logging

from fastapi import FastAPI
from sqlalchemy.exc import SQLAlchemyError

from backend.core import config
from backend.database import Base, engine
from backend.models import course, enrollment, professor, student, user
from backend.routes import auth_routes, student_routes

app = FastAPI()

logger = logging.getLogger(__name__)

MODEL_TABLES = [
    user.User.__table__,
    student.Student.__table__,
    professor.Professor.__table__,
    course.Course.__table__,
    enrollment.Enrollment.__table__,
]


@app.on_event('startup')
def initialize() -> None:
    # Missing JWT settings must stop the process, not fail per request.
    config.validate_runtime_config()

    try:
        Base.metadata.create_all(bind=engine, tables=MODEL_TABLES)
        student_routes.get_student_repository().ensure_schema()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and credentials.')


@app.get('/')
def root():
    return {'status': 'Student Registry API Running'}


app.include_router(auth_routes.router, prefix='/api/auth')
app.include_router(student_routes.router, prefix='/api/students')
