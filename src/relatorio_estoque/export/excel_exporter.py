from pathlib import Path
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side
from openpyxl.utils import get_column_letter
from datetime import datetime
import structlog

from ..models.payload import AiReportPayload

logger = structlog.get_logger(__name__)

HEADER_FONT = Font(bold=True, color="FFFFFF")
HEADER_FILL = PatternFill(start_color="2C3E50", end_color="2C3E50", fill_type="solid")
CENTER = Alignment(horizontal="center")
LEFT = Alignment(horizontal="left")
THIN_BORDER = Border(
    left=Side(style="thin"), right=Side(style="thin"),
    top=Side(style="thin"), bottom=Side(style="thin")
)
FORMATO_MOEDA = 'R$ #,##0.00'

# Cores por tipo de alerta
CORES_ALERTA = {
    "RUPTURA": (PatternFill(start_color="FF0000", fill_type="solid"), Font(color="FFFFFF", bold=True)),
    "EXCESSO": (PatternFill(start_color="FFFFE0", fill_type="solid"), Font(bold=True, color="B22222")),
    "PARADO": (PatternFill(start_color="808080", fill_type="solid"), Font(color="FFFFFF", bold=True)),
}
CORES_CURVA = {
    "A": PatternFill(start_color="CCFFCC", fill_type="solid"),
    "B": PatternFill(start_color="FFD700", fill_type="solid"),
    "C": PatternFill(start_color="E6F3FF", fill_type="solid"),
}


class ExcelExporter:
    def __init__(self, output_dir: Path):
        self.output_dir = output_dir
        self.output_dir.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def _escrever_aba(ws, headers, linhas, colunas_moeda=(), larg_max=50):
        ws.append(headers)
        for col_num in range(1, len(headers) + 1):
            cell = ws.cell(row=1, column=col_num)
            cell.font = HEADER_FONT
            cell.fill = HEADER_FILL
            cell.alignment = CENTER

        for row_idx, valores in enumerate(linhas, 2):
            for col_idx, val in enumerate(valores, 1):
                cell = ws.cell(row=row_idx, column=col_idx, value=val)
                cell.border = THIN_BORDER
                cell.alignment = LEFT if isinstance(val, str) else CENTER
                if headers[col_idx - 1] in colunas_moeda:
                    cell.number_format = FORMATO_MOEDA

        # Ajuste de largura
        for col_idx, column_cells in enumerate(ws.columns, 1):
            max_length = max(len(str(c.value)) if c.value is not None else 0 for c in column_cells)
            ws.column_dimensions[get_column_letter(col_idx)].width = min(max_length + 3, larg_max)

    def exportar_payload(self, payload: AiReportPayload, filename: str = None) -> Path:
        if filename is None:
            data_hoje = datetime.now().strftime("%Y%m%d_%H%M")
            filename = f"relatorio_estoque_{data_hoje}.xlsx"
        
        filepath = self.output_dir / filename
        logger.info("iniciando_export_excel", path=str(filepath))

        wb = Workbook()

        # ======== ABA KPIs ========
        ws = wb.active
        ws.title = "KPIs"
        k = payload.kpis
        self._escrever_aba(ws, ["INDICADOR", "VALOR"], [
            ["Empresa", payload.company.name],
            ["CNPJ", payload.company.cnpj],
            ["Período", f"{payload.period.start} a {payload.period.end}"],
            ["Itens Ativos", k.total_items],
            ["Itens Críticos (Ruptura)", k.critical_stock_items],
            ["Itens em Excesso", k.excess_stock_items],
            [f"Itens Parados ({payload.rules.dead_stock_days}d)", k.dead_stock_items_90d],
            ["Valor em Estoque", k.current_inventory_value],
            ["Compras no Período", k.total_purchases_period],
            ["Saídas no Período", k.total_exits_period],
        ], larg_max=60)
        for row in ws.iter_rows(min_row=9, max_row=11, min_col=2, max_col=2):
            for cell in row:
                cell.number_format = FORMATO_MOEDA

        # ======== ABA ALERTAS ========
        ws = wb.create_sheet("Alertas")
        self._escrever_aba(ws, ["TIPO", "PRODUTO", "SALDO", "MÍNIMO", "SUGESTÃO"], [
            [a.type.value, a.product, a.current_stock, a.min_stock, a.suggestion]
            for a in payload.alerts
        ], larg_max=80)
        for row_idx, alerta in enumerate(payload.alerts, 2):
            fill, font = CORES_ALERTA[alerta.type.value]
            cell = ws.cell(row=row_idx, column=1)
            cell.fill = fill
            cell.font = font

        # ======== ABA CURVA ABC ========
        ws = wb.create_sheet("Curva ABC")
        itens = (
            [("A", i) for i in payload.abc.curve_a]
            + [("B", i) for i in payload.abc.curve_b]
            + [("C", i) for i in payload.abc.curve_c]
        )
        self._escrever_aba(ws, ["CURVA", "PRODUTO", "CONSUMO", "% ACUMULADO"], [
            [curva, i.product, i.consumption_value, i.percentage] for curva, i in itens
        ], colunas_moeda=("CONSUMO",))
        for row_idx, (curva, _) in enumerate(itens, 2):
            ws.cell(row=row_idx, column=1).fill = CORES_CURVA[curva]

        # ======== ABA ESTOQUE PARADO ========
        ws = wb.create_sheet("Estoque Parado")
        self._escrever_aba(ws, ["PRODUTO", "DIAS SEM MOVIMENTO", "VALOR"], [
            [d.product, d.days_without_movement, d.value] for d in payload.dead_stock
        ], colunas_moeda=("VALOR",))

        wb.save(filepath)
        logger.info("export_excel_concluido", path=str(filepath))
        return filepath
