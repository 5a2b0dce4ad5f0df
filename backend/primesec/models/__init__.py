from primesec.models.user import User  # noqa: F401
from primesec.models.container import Container  # noqa: F401
from primesec.models.issue import SecurityIssue  # noqa: F401
from primesec.models.review import SecurityReview  # noqa: F401
from primesec.models.violation import SecurityViolation  # noqa: F401
from primesec.models.control import SecurityControl  # noqa: F401
from primesec.models.architecture import ArchitectureComponent  # noqa: F401
