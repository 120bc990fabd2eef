# ===================================
# app/core/exceptions.py
# ===================================
"""
Exceptions métier de l'application.

Les services lèvent ces exceptions, les gestionnaires globaux de main.py
les traduisent en enveloppe de réponse avec le bon code HTTP :
  - NotFoundError   -> 404
  - ValidationError -> 400
  - OperationError  -> 500 avec le message propre à l'opération
  - toute autre     -> 500
"""

from contextlib import contextmanager
from typing import Iterator, List, Optional

from app.core.validation import Violation


class AppError(Exception):
    """Classe de base des erreurs métier"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(AppError):
    """L'identifiant ne correspond à aucun enregistrement"""

    status_code = 404


class ValidationError(AppError):
    """Une ou plusieurs règles de schéma ne sont pas respectées"""

    status_code = 400

    def __init__(self, violations: List[Violation], message: str = "Validation failed"):
        super().__init__(message)
        self.violations = list(violations)

    @classmethod
    def single(cls, field: Optional[str], rule, message: str) -> "ValidationError":
        """Construire une erreur à partir d'une seule violation"""
        return cls([Violation(field=field, rule=rule, message=message)], message=message)

    @property
    def detail(self) -> str:
        """Messages des violations, séparés par des virgules"""
        return ", ".join(v.message for v in self.violations) or self.message

    def __str__(self) -> str:
        return self.detail


class OperationError(AppError):
    """Échec inattendu d'une opération (store indisponible, bug...)"""

    status_code = 500

    def __init__(self, message: str, cause: Exception):
        super().__init__(message)
        self.cause = cause

    def __str__(self) -> str:
        return str(self.cause)


@contextmanager
def operation(message: str) -> Iterator[None]:
    """
    Associer un message d'échec à une opération.
    Les erreurs métier passent telles quelles, les autres deviennent OperationError.
    """
    try:
        yield
    except AppError:
        raise
    except Exception as e:
        raise OperationError(message, e) from e
