class BaseAppException(Exception):
    """Clase base para excepciones personalizadas de la aplicación."""
    pass

class QueueOperationError(BaseAppException):
    """Error de una operación de la cola. El estado no se modifica."""
    code = "queue_error"

    def __init__(self, message="La operación no se pudo completar."):
        super().__init__(message)
        self.message = message

class NotFoundError(QueueOperationError):
    """La categoría, ventanilla o ticket referenciado no existe."""
    code = "not_found"

    def __init__(self, message="El elemento solicitado no existe."):
        super().__init__(message)

class InvalidTransitionError(QueueOperationError):
    """El ticket o la ventanilla no está en el estado que requiere la operación."""
    code = "invalid_transition"

    def __init__(self, message="La operación no es válida en el estado actual."):
        super().__init__(message)

class DatabaseQueryError(BaseAppException):
    """Excepción para errores ocurridos durante una consulta a la base de datos."""
    def __init__(self, message="Error al ejecutar la consulta en la base de datos.", original_exception=None):
        super().__init__(message)
        self.original_exception = original_exception
