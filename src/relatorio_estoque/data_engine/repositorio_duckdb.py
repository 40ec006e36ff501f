import asyncio
from typing import List, Optional

import duckdb
import structlog

from ..core.exceptions import UpstreamFetchError
from ..models.entidades import Empresa, Movimentacao, Produto, SaldoEstoque, UsuarioAtual
from .fonte_dados import Intervalo

logger = structlog.get_logger(__name__)

QUERY_PRODUTOS = """
    SELECT
        CAST(id AS VARCHAR) AS id,
        descricao,
        estoque_minimo,
        pmed,
        ativo,
        criado_em
    FROM sqlite_db.produtos
    WHERE CAST(company_id AS VARCHAR) = ?
    ORDER BY id
"""

# O SQLite guarda datas como texto, às vezes com hora ('2023-01-05T10:00:00')
DATA_MOVIMENTO_SQL = "CAST(LEFT(CAST(data_movimento AS VARCHAR), 10) AS DATE)"

QUERY_MOVIMENTACOES = f"""
    SELECT
        CAST(id AS VARCHAR) AS id,
        CAST(produto_id AS VARCHAR) AS produto_id,
        tipo,
        quantidade,
        valor_total,
        {DATA_MOVIMENTO_SQL} AS data_movimento
    FROM sqlite_db.movimentacoes
    WHERE CAST(company_id AS VARCHAR) = ?
    {{filtro_periodo}}
    ORDER BY data_movimento, id
"""

QUERY_SALDOS = """
    SELECT
        CAST(produto_id AS VARCHAR) AS produto_id,
        CAST(local_id AS VARCHAR) AS local_id,
        quantidade
    FROM sqlite_db.saldos_estoque
    WHERE CAST(company_id AS VARCHAR) = ?
"""

QUERY_EMPRESA = """
    SELECT CAST(id AS VARCHAR) AS id, nome, cnpj, setor, email, email_setor
    FROM sqlite_db.empresas
    WHERE CAST(id AS VARCHAR) = ?
"""

QUERY_PERFIL = """
    SELECT CAST(id AS VARCHAR) AS id, CAST(company_id AS VARCHAR) AS company_id, nome, email
    FROM sqlite_db.perfis
    WHERE CAST(id AS VARCHAR) = ?
"""


class FonteDuckDB:
    """
    Implementação da FonteSnapshots sobre o DuckDBManager.
    As consultas são síncronas; rodam em threads para não bloquear o loop.
    """

    def __init__(self, db_manager, usuario_id: Optional[str] = None):
        self.db = db_manager
        self.usuario_id = usuario_id

    def _consultar(self, operacao: str, query: str, params: list) -> list[dict]:
        try:
            with self.db.get_connection() as conn:
                linhas = conn.execute(query, params).pl().to_dicts()
        except (duckdb.Error, RuntimeError) as e:
            logger.error("falha_leitura_fonte", operacao=operacao, error=str(e))
            raise UpstreamFetchError(operacao, str(e)) from e
        logger.debug("leitura_fonte", operacao=operacao, linhas=len(linhas))
        return linhas

    async def buscar_produtos(self, company_id: str) -> List[Produto]:
        linhas = await asyncio.to_thread(self._consultar, "produtos", QUERY_PRODUTOS, [str(company_id)])
        return [Produto.model_validate(l) for l in linhas]

    async def buscar_movimentacoes(self, company_id: str, intervalo: Optional[Intervalo] = None) -> List[Movimentacao]:
        inicio, fim = intervalo if intervalo is not None else (None, None)
        params = [str(company_id)]
        filtros = []
        if inicio is not None:
            filtros.append(f"AND {DATA_MOVIMENTO_SQL} >= ?")
            params.append(inicio)
        if fim is not None:
            filtros.append(f"AND {DATA_MOVIMENTO_SQL} <= ?")
            params.append(fim)
        query = QUERY_MOVIMENTACOES.format(filtro_periodo=" ".join(filtros))
        linhas = await asyncio.to_thread(self._consultar, "movimentacoes", query, params)
        return [Movimentacao.model_validate(l) for l in linhas]

    async def buscar_saldos(self, company_id: str) -> List[SaldoEstoque]:
        linhas = await asyncio.to_thread(self._consultar, "saldos", QUERY_SALDOS, [str(company_id)])
        return [SaldoEstoque.model_validate(l) for l in linhas]

    async def buscar_empresa(self, company_id: str) -> Optional[Empresa]:
        linhas = await asyncio.to_thread(self._consultar, "empresa", QUERY_EMPRESA, [str(company_id)])
        return Empresa.model_validate(linhas[0]) if linhas else None

    async def obter_usuario_atual(self) -> Optional[UsuarioAtual]:
        if not self.usuario_id:
            return None
        linhas = await asyncio.to_thread(self._consultar, "usuario", QUERY_PERFIL, [str(self.usuario_id)])
        return UsuarioAtual.model_validate(linhas[0]) if linhas else None
