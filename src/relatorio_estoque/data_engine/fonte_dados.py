from datetime import date
from typing import Iterable, List, Optional, Protocol, Tuple

from ..models.entidades import Empresa, Movimentacao, Produto, SaldoEstoque, UsuarioAtual

Intervalo = Tuple[Optional[date], Optional[date]]


class FonteSnapshots(Protocol):
    """
    Contrato da fonte de dados consumida pelo ReportAggregator.
    Todas as leituras são independentes entre si e podem rodar em paralelo.
    """

    async def buscar_produtos(self, company_id: str) -> List[Produto]: ...

    async def buscar_movimentacoes(
        self, company_id: str, intervalo: Optional[Intervalo] = None
    ) -> List[Movimentacao]: ...

    async def buscar_saldos(self, company_id: str) -> List[SaldoEstoque]: ...

    async def buscar_empresa(self, company_id: str) -> Optional[Empresa]: ...

    async def obter_usuario_atual(self) -> Optional[UsuarioAtual]: ...


def filtrar_intervalo(movimentacoes: Iterable[Movimentacao], intervalo: Optional[Intervalo]) -> List[Movimentacao]:
    """Aplica o intervalo (inclusivo; pontas None = sem limite)."""
    if intervalo is None:
        return list(movimentacoes)
    inicio, fim = intervalo
    return [
        m for m in movimentacoes
        if (inicio is None or m.data_movimento >= inicio)
        and (fim is None or m.data_movimento <= fim)
    ]


class FonteMemoria:
    """
    Fonte em memória para uma única empresa.
    Recebe registros já tipados ou dicionários no formato do banco.
    """

    def __init__(self, produtos=(), movimentacoes=(), saldos=(), empresa=None, usuario=None):
        self.produtos = [p if isinstance(p, Produto) else Produto.model_validate(p) for p in produtos]
        self.movimentacoes = [
            m if isinstance(m, Movimentacao) else Movimentacao.model_validate(m) for m in movimentacoes
        ]
        self.saldos = [s if isinstance(s, SaldoEstoque) else SaldoEstoque.model_validate(s) for s in saldos]
        if empresa is not None and not isinstance(empresa, Empresa):
            empresa = Empresa.model_validate(empresa)
        if usuario is not None and not isinstance(usuario, UsuarioAtual):
            usuario = UsuarioAtual.model_validate(usuario)
        self.empresa = empresa
        self.usuario = usuario

    async def buscar_produtos(self, company_id: str) -> List[Produto]:
        return list(self.produtos)

    async def buscar_movimentacoes(self, company_id: str, intervalo: Optional[Intervalo] = None) -> List[Movimentacao]:
        return filtrar_intervalo(self.movimentacoes, intervalo)

    async def buscar_saldos(self, company_id: str) -> List[SaldoEstoque]:
        return list(self.saldos)

    async def buscar_empresa(self, company_id: str) -> Optional[Empresa]:
        return self.empresa

    async def obter_usuario_atual(self) -> Optional[UsuarioAtual]:
        return self.usuario
