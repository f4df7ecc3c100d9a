from .converters import DateFieldFormatter, EnrollmentDateConverter, ProgramEnrollment

__all__ = [
    "DateFieldFormatter",
    "EnrollmentDateConverter",
    "ProgramEnrollment",
]
