GRADE_BOUNDARIES = (
    (90, 'A+'),
    (80, 'A'),
    (70, 'B'),
    (60, 'C'),
    (50, 'D'),
)


def get_grade(percentage):
    """Grade letter for a percentage (0-100)."""
    for minimum, grade in GRADE_BOUNDARIES:
        if percentage >= minimum:
            return grade
    return 'F'
