import asyncio
from datetime import date
from typing import Optional, Union

import polars as pl
import structlog

from ..core.config import ParametrosRelatorio
from ..core.exceptions import InvalidRangeError, MissingCompanyContextError
from ..data_engine.fonte_dados import FonteSnapshots
from ..models.entidades import Empresa, para_data
from ..models.payload import (
    AiReportPayload,
    EmpresaPayload,
    KpisPayload,
    PeriodoPayload,
    RegrasPayload,
)
from ..rule_engine.alerts.alert_builder import AlertBuilder
from ..rule_engine.classification.abc_classifier import ABCClassifier
from ..rule_engine.stock.estoque_math import EstoqueMath
from ..rule_engine.validators.input_schema import MovimentacoesSchema, ProdutosSchema
from ..utils.sanitizer import avisar_saldos_negativos, sanear_produtos

logger = structlog.get_logger(__name__)

DataLike = Union[date, str]


def _ler_data(valor: DataLike, nome: str) -> date:
    try:
        data = para_data(valor)
    except (TypeError, ValueError) as e:
        raise InvalidRangeError(f"Data de {nome} inválida: {valor!r}") from e
    if not isinstance(data, date):
        raise InvalidRangeError(f"Data de {nome} inválida: {valor!r}")
    return data


class ReportAggregator:
    """
    Monta o payload do relatório de otimização de estoque.

    Toda a matemática acontece aqui (KPIs, alertas, curva ABC, estoque parado);
    quem consome o payload apenas interpreta. Não grava nada: persistência e
    envio são responsabilidade de quem chama.
    """

    def __init__(self, fonte: FonteSnapshots, company_id: Optional[str],
                 parametros: Optional[ParametrosRelatorio] = None):
        self.fonte = fonte
        self.company_id = company_id
        self.parametros = parametros or ParametrosRelatorio()

    @classmethod
    async def from_current_user(cls, fonte: FonteSnapshots,
                                parametros: Optional[ParametrosRelatorio] = None) -> "ReportAggregator":
        """Resolve a empresa a partir do usuário autenticado na fonte."""
        usuario = await fonte.obter_usuario_atual()
        if usuario is None or not usuario.company_id:
            raise MissingCompanyContextError("Usuário sem empresa vinculada.")
        return cls(fonte, usuario.company_id, parametros)

    async def _buscar_snapshots(self):
        # Leituras independentes: disparadas juntas, a agregação espera as quatro
        return await asyncio.gather(
            self.fonte.buscar_produtos(self.company_id),
            self.fonte.buscar_movimentacoes(self.company_id),
            self.fonte.buscar_saldos(self.company_id),
            self.fonte.buscar_empresa(self.company_id),
        )

    async def build_report_payload(self, period_start: DataLike, period_end: DataLike,
                                   data_referencia: Optional[DataLike] = None) -> AiReportPayload:
        inicio = _ler_data(period_start, "início")
        fim = _ler_data(period_end, "fim")
        if inicio > fim:
            raise InvalidRangeError(f"Período inválido: início {inicio} é posterior ao fim {fim}.")
        # Sem "hoje" implícito: a idade do estoque é medida no fim do período
        referencia = _ler_data(data_referencia, "referência") if data_referencia is not None else fim

        if not self.company_id:
            raise MissingCompanyContextError("Nenhuma empresa autenticada no contexto.")

        logger.info("montando_payload", company_id=self.company_id, inicio=str(inicio), fim=str(fim))
        produtos, movimentacoes, saldos, empresa = await self._buscar_snapshots()

        return self._agregar(produtos, movimentacoes, saldos, empresa, inicio, fim, referencia)

    def _agregar(self, produtos, movimentacoes, saldos, empresa: Optional[Empresa],
                 inicio: date, fim: date, referencia: date) -> AiReportPayload:
        cfg = self.parametros
        dias_parado = cfg.parado.dias_sem_movimento

        # 1. Frames tipados + blindagem + contrato
        df_produtos = ProdutosSchema.validate(sanear_produtos(EstoqueMath.produtos_para_df(produtos)))
        df_mov = MovimentacoesSchema.validate(EstoqueMath.movimentacoes_para_df(movimentacoes))
        df_saldos = EstoqueMath.saldos_para_df(saldos)
        avisar_saldos_negativos(df_saldos)

        # 2. Período e consumo
        df_periodo = EstoqueMath.filtrar_periodo(df_mov, inicio, fim)
        dias_no_periodo = (fim - inicio).days + 1
        df_consumo = EstoqueMath.consumo_por_produto(df_periodo)

        # 3. Posição dos ativos com consumo, idade e situação
        df = (
            EstoqueMath.montar_posicao(df_produtos, df_saldos)
            .join(df_consumo, left_on="id", right_on="produto_id", how="left")
            .with_columns([
                pl.col("consumo_valor").fill_null(0.0),
                pl.col("consumo_qtd").fill_null(0.0),
            ])
            .with_columns((pl.col("consumo_qtd") / dias_no_periodo).alias("consumo_medio_dia"))
        )
        df = EstoqueMath.calcular_dias_parado(df, df_mov, referencia)
        df = EstoqueMath.marcar_situacao(df, cfg.estoque.multiplo_excesso, dias_parado)

        # 4. Alertas, parados e curva ABC
        builder = AlertBuilder(dias_parado)
        alertas = builder.gerar(df)
        parados = builder.itens_parados(df)
        abc = ABCClassifier(cfg.cortes_abc).run(df.select(["id", "descricao", "consumo_valor"]))

        kpis = KpisPayload(
            total_items=df.height,
            critical_stock_items=int(df["em_ruptura"].sum()),
            excess_stock_items=int(df["em_excesso"].sum()),
            dead_stock_items_90d=len(parados),
            current_inventory_value=round(float(df["valor_estoque"].sum() or 0.0), 2),
            total_purchases_period=round(EstoqueMath.total_por_tipo(df_periodo, "IN"), 2),
            total_exits_period=round(EstoqueMath.total_por_tipo(df_periodo, "OUT"), 2),
        )

        payload = AiReportPayload(
            company=EmpresaPayload(
                name=(empresa.nome if empresa else "") or "Empresa Não Identificada",
                cnpj=empresa.cnpj if empresa else "",
                sector=(empresa.setor if empresa else "") or "Geral",
            ),
            period=PeriodoPayload(start=inicio.isoformat(), end=fim.isoformat()),
            kpis=kpis,
            alerts=alertas,
            abc=abc,
            dead_stock=parados,
            rules=RegrasPayload(
                min_stock_method=cfg.estoque.metodo_estoque_minimo,
                dead_stock_days=dias_parado,
                excess_stock_multiple=cfg.estoque.multiplo_excesso,
                abc_cutoffs=dict(cfg.abc),
            ),
        )

        logger.info(
            "payload_montado",
            itens=kpis.total_items,
            criticos=kpis.critical_stock_items,
            excesso=kpis.excess_stock_items,
            parados=kpis.dead_stock_items_90d,
            alertas=len(alertas),
        )
        return payload
