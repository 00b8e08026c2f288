"""
Domain exceptions raised by services and the authentication module.

Nothing below the router layer raises HTTPException. main.py maps each
category to a status code in one place and normalises the error body to
{"detail": ..., "correlation_id": ...}.
"""

from core.correlation import generate_correlation_id, get_correlation_id


class DomainException(Exception):
    """
    Base class for all domain exceptions.

    Attributes:
        message: Human-readable error message.
        correlation_id: ID of the failing request (generated if outside one).
    """

    def __init__(self, message: str, correlation_id: str | None = None):
        self.message = message
        self.correlation_id = (
            correlation_id or get_correlation_id() or generate_correlation_id()
        )
        super().__init__(self.message)


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    pass


class PermissionDeniedException(DomainException):
    """Raised when the caller is authenticated but not allowed."""

    pass


class ValidationException(DomainException):
    """Raised when input passes schema validation but breaks a domain rule."""

    pass


class ConflictException(DomainException):
    """Raised when an operation conflicts with the current state."""

    pass


class AuthenticationException(DomainException):
    """Raised when authentication fails."""

    pass


class AlreadyExistsException(DomainException):
    """Raised when trying to create a resource that already exists."""

    pass


class BusinessRuleException(DomainException):
    """Raised when a business rule is violated."""

    pass


# Authentication and access


class InvalidCredentialsException(AuthenticationException):
    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message)


class InsufficientPermissionsException(PermissionDeniedException):
    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(message)


class UserBlockedException(PermissionDeniedException):
    def __init__(self, message: str = "Account is blocked"):
        super().__init__(message)


class UnverifiedUserException(PermissionDeniedException):
    def __init__(self, message: str = "Account not verified"):
        super().__init__(message)


class NotContentOwnerException(PermissionDeniedException):
    """Caller is neither the author of the content nor an admin."""

    def __init__(self, message: str = "You can only modify your own content"):
        super().__init__(message)


class InvalidTeacherCodeException(ValidationException):
    def __init__(self, message: str = "Código de maestro inválido"):
        super().__init__(message)


class UserAlreadyExistsException(AlreadyExistsException):
    def __init__(self, message: str = "Email already registered"):
        super().__init__(message)


# Not found


class UserNotFoundException(NotFoundException):
    def __init__(self, message: str = "User not found"):
        super().__init__(message)


class EventNotFoundException(NotFoundException):
    def __init__(self, message: str = "Event not found"):
        super().__init__(message)


class PostNotFoundException(NotFoundException):
    def __init__(self, message: str = "Post not found"):
        super().__init__(message)


class CommentNotFoundException(NotFoundException):
    def __init__(self, message: str = "Comment not found"):
        super().__init__(message)


class FileNotFoundException(NotFoundException):
    def __init__(self, message: str = "File not found"):
        super().__init__(message)


class GroupNotFoundException(NotFoundException):
    def __init__(self, message: str = "Group not found"):
        super().__init__(message)


class MessageNotFoundException(NotFoundException):
    def __init__(self, message: str = "Message not found"):
        super().__init__(message)


class QuestionNotFoundException(NotFoundException):
    def __init__(self, message: str = "Question not found"):
        super().__init__(message)


class AnswerNotFoundException(NotFoundException):
    def __init__(self, message: str = "Answer not found"):
        super().__init__(message)


class ReportNotFoundException(NotFoundException):
    def __init__(self, message: str = "Report not found"):
        super().__init__(message)


class NotificationNotFoundException(NotFoundException):
    def __init__(self, message: str = "Notification not found"):
        super().__init__(message)


class BadgeNotFoundException(NotFoundException):
    def __init__(self, message: str = "Badge not found"):
        super().__init__(message)


# ============================================================================
# Events
# ============================================================================


class InvalidEventWindowException(ValidationException):
    """start_time must be strictly before end_time."""

    def __init__(self, message: str = "start_time must be before end_time"):
        super().__init__(message)


class NotEventHostException(PermissionDeniedException):
    def __init__(self, message: str = "Only event host can delete"):
        super().__init__(message)


class CannotBookOwnEventException(BusinessRuleException):
    def __init__(self, message: str = "Cannot book your own event"):
        super().__init__(message)


class AlreadyBookedException(ConflictException):
    def __init__(self, message: str = "Already booked"):
        super().__init__(message)


class EventFullException(ConflictException):
    def __init__(self, message: str = "Event is full"):
        super().__init__(message)


# ============================================================================
# Groups, files, badges, moderation
# ============================================================================


class NotGroupMemberException(PermissionDeniedException):
    def __init__(self, message: str = "You are not a member of this group"):
        super().__init__(message)


class AlreadyGroupMemberException(ConflictException):
    def __init__(self, message: str = "Already a member"):
        super().__init__(message)


class InvalidUploadException(ValidationException):
    """Raised for a missing, oversized or disallowed upload."""

    pass


class BadgeAlreadyAssignedException(ConflictException):
    def __init__(self, message: str = "User already has this badge"):
        super().__init__(message)


class ReportAlreadyResolvedException(ConflictException):
    """Raised when resolving a report that reached a terminal status."""

    def __init__(self, report_id: int):
        super().__init__(f"Report {report_id} has already been resolved")
        self.report_id = report_id


class CannotModerateSelfException(BusinessRuleException):
    """An admin cannot block or demote their own account."""

    def __init__(self, message: str = "You cannot change your own account status"):
        super().__init__(message)


class CannotVoteOwnContentException(BusinessRuleException):
    def __init__(self, message: str = "Cannot vote on your own question or answer"):
        super().__init__(message)
