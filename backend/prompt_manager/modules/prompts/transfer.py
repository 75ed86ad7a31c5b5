"""
Conversao de arquivos de importacao e exportacao de prompts.

Importacao: JSON (array ou objeto unico), CSV (cabecalho + linhas) e
Markdown/texto (secoes iniciadas por # ou ##). Cada formato resulta em
uma lista de dicionarios que depois passa pelo fluxo normal de criacao.

Exportacao: JSON ou CSV com todos os campos entre aspas.
"""

import csv
import io
import json
import re
from pathlib import PurePath

from prompt_manager.modules.prompts.models import Prompt
from prompt_manager.modules.prompts.schemas import PromptExportRecord
from prompt_manager.shared.exceptions import BadRequestException, ImportException

SUPPORTED_IMPORT_EXTENSIONS = {
    '.json': 'json',
    '.csv': 'csv',
    '.md': 'markdown',
    '.txt': 'markdown',
}
EXPORT_FORMATS = {
    'json': ('application/json', 'prompts.json'),
    'csv': ('text/csv; charset=utf-8', 'prompts.csv'),
}
MARKDOWN_DESCRIPTION = 'Importado de arquivo Markdown'

# Inicio de secao: "# Titulo" ou "## Titulo" no comeco da linha
_MARKDOWN_SECTION_RE = re.compile(r'^#{1,2}\s+', re.MULTILINE)


# -------------------------------------------------------------------------
# Importacao
# -------------------------------------------------------------------------


def detect_import_format(filename: str | None) -> str:
    """
    Identifica o formato do arquivo pela extensao.

    Raises:
        BadRequestException: Se a extensao nao for suportada.
    """
    extension = PurePath(filename or '').suffix.lower()
    file_format = SUPPORTED_IMPORT_EXTENSIONS.get(extension)
    if file_format is None:
        raise BadRequestException(
            'Formato de arquivo nao suportado. Use .json, .csv, .md ou .txt'
        )
    return file_format


def _decode(raw: bytes) -> str:
    try:
        return raw.decode('utf-8-sig')
    except UnicodeDecodeError as e:
        raise ImportException('O arquivo nao esta codificado em UTF-8') from e


def parse_json(text: str) -> list[dict]:
    """Le um array de objetos ou um objeto unico."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ImportException(f'JSON invalido: {e.msg} (linha {e.lineno})') from e

    items = data if isinstance(data, list) else [data]
    return [item for item in items if isinstance(item, dict)]


def parse_csv(text: str) -> list[dict]:
    """Le um CSV com cabecalho; cada linha vira um dicionario."""
    try:
        reader = csv.DictReader(io.StringIO(text))
        return [dict(row) for row in reader]
    except csv.Error as e:
        raise ImportException(f'CSV invalido: {e}') from e


def parse_markdown(text: str) -> list[dict]:
    """
    Divide o texto em secoes por cabecalhos # ou ##.

    A primeira linha de cada secao e o titulo e o restante o conteudo.
    Secoes sem titulo ou sem conteudo sao descartadas.
    """
    records: list[dict] = []
    for section in _MARKDOWN_SECTION_RE.split(text):
        if not section.strip():
            continue
        lines = section.split('\n')
        title = lines[0].strip()
        content = '\n'.join(lines[1:]).strip()
        if title and content:
            records.append({
                'title': title,
                'content': content,
                'description': MARKDOWN_DESCRIPTION,
            })
    return records


_PARSERS = {
    'json': parse_json,
    'csv': parse_csv,
    'markdown': parse_markdown,
}


def parse_upload(filename: str | None, raw: bytes) -> tuple[str, list[dict]]:
    """
    Converte o arquivo enviado em registros brutos.

    Args:
        filename: Nome original do arquivo (define o formato).
        raw: Conteudo do arquivo.

    Returns:
        Tupla com o formato detectado e a lista de registros.

    Raises:
        BadRequestException: Extensao nao suportada.
        ImportException: Conteudo que nao pode ser interpretado.
    """
    file_format = detect_import_format(filename)
    return file_format, _PARSERS[file_format](_decode(raw))


# -------------------------------------------------------------------------
# Exportacao
# -------------------------------------------------------------------------


def to_export_records(prompts: list[Prompt]) -> list[dict]:
    """Serializa prompts no formato de exportacao (chaves camelCase)."""
    records = []
    for prompt in prompts:
        record = PromptExportRecord(
            id=prompt.id,
            title=prompt.title,
            content=prompt.content,
            description=prompt.description,
            category=prompt.category.name if prompt.category else None,
            tags=[tag.name for tag in prompt.tags],
            priority=prompt.priority,
            use_count=prompt.use_count,
            rating=prompt.rating,
            is_favorite=prompt.is_favorite,
            created_at=prompt.created_at,
            updated_at=prompt.updated_at,
        )
        records.append(record.model_dump(mode='json', by_alias=True))
    return records


def _csv_cell(value) -> str:
    if value is None:
        text = ''
    elif isinstance(value, list):
        text = ';'.join(str(item) for item in value)
    elif isinstance(value, bool):
        text = 'true' if value else 'false'
    else:
        text = str(value)
    return '"' + text.replace('"', '""') + '"'


def to_csv(records: list[dict]) -> str:
    """
    Gera o CSV de exportacao.

    Cabecalho sem aspas; todos os valores entre aspas com aspas internas
    duplicadas; listas unidas por ';'. Conjunto vazio gera corpo vazio.
    """
    if not records:
        return ''

    headers = list(records[0].keys())
    lines = [','.join(headers)]
    for record in records:
        lines.append(','.join(_csv_cell(record.get(header)) for header in headers))
    return '\n'.join(lines)


def render_export(records: list[dict], export_format: str) -> tuple[str, str, str]:
    """
    Renderiza os registros no formato solicitado.

    Returns:
        Tupla (corpo, media type, nome do arquivo).

    Raises:
        BadRequestException: Se o formato nao for json ou csv.
    """
    if export_format not in EXPORT_FORMATS:
        raise BadRequestException('Formato de exportacao nao suportado')

    media_type, filename = EXPORT_FORMATS[export_format]
    if export_format == 'json':
        body = json.dumps(records, ensure_ascii=False)
    else:
        body = to_csv(records)
    return body, media_type, filename
