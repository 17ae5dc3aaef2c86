from datetime import date

from sqlalchemy import inspect

from backend.models.course import Course
from backend.models.enrollment import Enrollment
from backend.models.professor import Professor
from backend.models.student import Student


def test_domain_tables_are_created(db_engine) -> None:
    tables = set(inspect(db_engine).get_table_names())

    assert {'users', 'students', 'professors', 'courses', 'enrollments'} <= tables


def test_enrollment_links_student_and_course(session_factory) -> None:
    with session_factory() as db:
        professor = Professor(name='Marta Reis', email='marta@school.org')
        db.add(professor)
        db.flush()
        course = Course(name='Databases', professor_id=professor.id)
        student = Student(name='Ana Souza', age=20, email='ana@ex.com', birth_date=date(2005, 1, 10))
        db.add_all([course, student])
        db.flush()
        db.add(Enrollment(student_id=student.id, course_id=course.id, status='active'))
        db.commit()

        enrollment = db.get(Enrollment, (student.id, course.id))

    assert enrollment.status == 'active'
    assert enrollment.enrolled_at is not None
