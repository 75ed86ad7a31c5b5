class NotFoundException(Exception):
    """Excecao para recurso nao encontrado (HTTP 404)."""

    def __init__(self, message: str = 'Recurso nao encontrado') -> None:
        self.message = message
        super().__init__(self.message)


class BadRequestException(Exception):
    """Excecao para requisicao invalida (HTTP 400)."""

    def __init__(self, message: str = 'Requisicao invalida') -> None:
        self.message = message
        super().__init__(self.message)


class ConflictException(BadRequestException):
    """
    Excecao para conflito com o estado atual (HTTP 400).

    Usada para nomes duplicados e exclusao de registros ainda em uso.
    """

    def __init__(self, message: str = 'Conflito com dados existentes') -> None:
        super().__init__(message)


class ImportException(Exception):
    """Excecao para arquivo de importacao que nao pode ser processado (HTTP 500)."""

    def __init__(self, message: str = 'Falha ao importar prompts') -> None:
        self.message = message
        super().__init__(self.message)
