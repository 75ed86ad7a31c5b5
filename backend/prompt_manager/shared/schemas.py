import math

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Schema base da API.

    Campos em snake_case no Python e camelCase no JSON. Aceita os dois
    formatos na entrada.
    """

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class Pagination(CamelModel):
    """Metadados de paginacao retornados nas listagens."""

    page: int
    limit: int
    total: int
    pages: int

    @classmethod
    def create(cls, page: int, limit: int, total: int) -> 'Pagination':
        """Cria os metadados calculando o total de paginas (0 quando total=0)."""
        pages = math.ceil(total / limit) if limit > 0 else 0
        return cls(page=page, limit=limit, total=total, pages=pages)


class MessageResponse(BaseModel):
    """Resposta padrao de operacoes sem corpo proprio."""

    message: str


class ErrorDetail(BaseModel):
    """Erro de validacao de um campo especifico."""

    field: str
    message: str


class ErrorResponse(BaseModel):
    """Corpo padrao de respostas de erro."""

    error: str
    details: list[ErrorDetail] | None = None
