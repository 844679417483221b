from __future__ import annotations


class RecipeAppError(Exception):
    """Base error. `user_message` is safe to show to the person using the app."""

    user_message = "Ocorreu um erro inesperado. Por favor, tente novamente."

    def __init__(self, message: str | None = None, user_message: str | None = None):
        super().__init__(message or self.user_message)
        if user_message is not None:
            self.user_message = user_message


class AuthError(RecipeAppError):
    user_message = "Falha ao fazer login. Verifique suas credenciais."


class StoreError(RecipeAppError):
    def __init__(self, operation: str, reason: str):
        super().__init__(f"Recipe store error during {operation}: {reason}")
        self.operation = operation
        self.reason = reason


class StoreReadError(StoreError):
    user_message = "Erro ao carregar receitas. Por favor, tente novamente mais tarde."


class IndexBuildingError(StoreReadError):
    user_message = (
        "O índice está a ser construído. Por favor, aguarde alguns minutos e tente novamente."
    )


class StoreWriteError(StoreError):
    user_message = "Erro ao guardar receita. Por favor, tente novamente."


class UploadError(RecipeAppError):
    user_message = "Erro ao fazer upload da imagem"


class ImageTooLargeError(UploadError):
    def __init__(self, filename: str, size_bytes: int, limit_bytes: int):
        super().__init__(
            f"Image {filename} has {size_bytes} bytes (limit {limit_bytes})",
            user_message=f"A imagem deve ter menos de {limit_bytes // (1024 * 1024)}MB",
        )
        self.filename = filename
        self.size_bytes = size_bytes
        self.limit_bytes = limit_bytes


class InvalidImageError(UploadError):
    def __init__(self, filename: str, content_type: str | None):
        super().__init__(
            f"Unsupported content type for {filename}: {content_type}",
            user_message="O ficheiro selecionado não é uma imagem válida",
        )
        self.filename = filename
        self.content_type = content_type


class RecipeValidationError(RecipeAppError):
    def __init__(self, user_message: str, field: str | None = None):
        super().__init__(f"Invalid recipe form ({field or 'form'}): {user_message}", user_message)
        self.field = field


class RecipeNotFoundError(RecipeAppError):
    user_message = "Receita não encontrada."

    def __init__(self, recipe_id: str):
        super().__init__(f"Recipe not found: {recipe_id}")
        self.recipe_id = recipe_id
