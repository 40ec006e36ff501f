import argparse
import asyncio
import sys
from datetime import datetime
from pathlib import Path

from pandera.errors import SchemaError
from pydantic import ValidationError

from .core.config import ConfigManager, ParametrosRelatorio
from .core.exceptions import RelatorioError
from .core.reporter import ExecutionReporter
from .core.system_guard import SystemGuard
from .data_engine.duckdb_manager import DuckDBManager
from .data_engine.repositorio_duckdb import FonteDuckDB
from .export.excel_exporter import ExcelExporter
from .export.html_renderer import renderizar_html
from .notificacao.email_sender import EnviadorResend, enviar_relatorio, separar_destinatarios
from .report.aggregator import ReportAggregator


def criar_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Gera o relatório de otimização de estoque de uma empresa.")
    parser.add_argument("--inicio", required=True, help="Início do período (AAAA-MM-DD)")
    parser.add_argument("--fim", required=True, help="Fim do período (AAAA-MM-DD)")
    grupo = parser.add_mutually_exclusive_group(required=True)
    grupo.add_argument("--empresa", help="ID da empresa")
    grupo.add_argument("--usuario", help="ID do usuário (a empresa vem do perfil)")
    parser.add_argument("--db", type=Path, default=Path("data") / "almoxarifado.db", help="Banco SQLite")
    parser.add_argument("--config", type=Path, default=Path("config"), help="Pasta com parametros.yaml")
    parser.add_argument("--saida", type=Path, default=Path("data"), help="Pasta de saída (JSON/Excel)")
    parser.add_argument("--excel", action="store_true", help="Exporta também o Excel")
    parser.add_argument("--email", default="", help="Destinatários separados por vírgula")
    return parser


def carregar_parametros(config_dir: Path) -> ParametrosRelatorio:
    config_mgr = ConfigManager()
    if (config_dir / "parametros.yaml").exists():
        config_mgr.load_configs(config_dir)
        return config_mgr.parametros
    return ParametrosRelatorio()


async def executar(args, fonte, parametros: ParametrosRelatorio, guard: SystemGuard, enviador=None):
    """Monta o payload e distribui: JSON sempre, Excel e e-mail sob demanda."""
    if args.empresa:
        aggregator = ReportAggregator(fonte, args.empresa, parametros)
    else:
        aggregator = await ReportAggregator.from_current_user(fonte, parametros)

    inicio_exec = datetime.now()
    payload = await aggregator.build_report_payload(args.inicio, args.fim)
    guard.log_performance("montagem do payload", inicio_exec)
    guard.log(
        f"📊 {payload.kpis.total_items} itens | {payload.kpis.critical_stock_items} em ruptura | "
        f"{len(payload.alerts)} alertas"
    )

    reporter = ExecutionReporter(args.saida)
    reporter.limpar_stats_anteriores()
    reporter.salvar_payload(payload, aggregator.company_id)
    guard.log(f"💾 Payload salvo em: {reporter.report_path}")

    if args.excel:
        arquivo = ExcelExporter(args.saida / "exports").exportar_payload(payload)
        guard.log(f"✅ Relatório Excel disponível em: {arquivo}")

    destinatarios = separar_destinatarios(args.email)
    if destinatarios:
        enviador = enviador or EnviadorResend(parametros.email)
        message_id = enviar_relatorio(enviador, destinatarios, payload.company.name, renderizar_html(payload))
        guard.log(f"📧 Relatório enviado para {len(destinatarios)} destinatário(s) (id {message_id}).")

    return payload


def main(argv=None):
    args = criar_parser().parse_args(argv)

    guard = SystemGuard(Path("logs"))
    guard.log(f"🚀 Relatório solicitado: {args.inicio} a {args.fim}")

    db = DuckDBManager()

    try:
        parametros = carregar_parametros(args.config)
        db.initialize(args.db)
        fonte = FonteDuckDB(db, usuario_id=args.usuario)
        asyncio.run(executar(args, fonte, parametros, guard))
        guard.log("🏁 Processamento concluído com sucesso!")
    except (RelatorioError, SchemaError, ValidationError, RuntimeError, FileNotFoundError) as e:
        guard.logger.error(f"❌ ERRO CRÍTICO DURANTE EXECUÇÃO: {e}")
        return 1
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
