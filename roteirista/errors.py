"""Errors surfaced to the user by the controller."""

from __future__ import annotations


class RoteiristaError(Exception):
    """Base error carrying a message safe to show to the user."""

    def __init__(self, user_message: str):
        super().__init__(user_message)
        self.user_message = user_message


class MissingCredential(RoteiristaError):
    def __init__(self):
        super().__init__(
            "Por favor, insira sua chave de API do Gemini para continuar."
        )


class GenerationFailed(RoteiristaError):
    def __init__(self):
        super().__init__(
            "Não foi possível gerar o roteiro. Verifique sua chave de API e tente novamente."
        )


class RegenerationFailed(RoteiristaError):
    def __init__(self, block: str):
        super().__init__(
            f"Não foi possível ajustar '{block}'. Verifique sua chave de API e tente novamente."
        )
        self.block = block


class BlockBusy(RoteiristaError):
    def __init__(self, block: str):
        super().__init__(f"'{block}' já está sendo ajustado. Aguarde a conclusão.")
        self.block = block
