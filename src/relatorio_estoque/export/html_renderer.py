from html import escape

from ..models.payload import AiReportPayload

COR_DESTAQUE = "#7c3aed"
CORES_ALERTA = {"RUPTURA": "#dc2626", "EXCESSO": "#d97706", "PARADO": "#6b7280"}


def formatar_moeda(valor: float) -> str:
    """Formato brasileiro: 1234.5 -> 'R$ 1.234,50'."""
    texto = f"{valor:,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    return f"R$ {texto}"


def formatar_data(iso: str) -> str:
    ano, mes, dia = iso.split("-")
    return f"{dia}/{mes}/{ano}"


def _tabela(headers, linhas) -> str:
    th = "".join(
        f'<th style="padding:8px;text-align:left;border-bottom:2px solid #e5e7eb;">{escape(h)}</th>'
        for h in headers
    )
    corpo = "".join(
        "<tr>" + "".join(
            f'<td style="padding:8px;border-bottom:1px solid #f3f4f6;">{c}</td>' for c in linha
        ) + "</tr>"
        for linha in linhas
    )
    return f'<table width="100%" cellpadding="0" cellspacing="0" style="border-collapse:collapse;font-size:14px;"><tr>{th}</tr>{corpo}</table>'


def renderizar_html(payload: AiReportPayload) -> str:
    """Corpo HTML do e-mail 'Relatório de Otimização' a partir do payload."""
    k = payload.kpis
    periodo = f"{formatar_data(payload.period.start)} a {formatar_data(payload.period.end)}"

    kpis = _tabela(["Indicador", "Valor"], [
        ["Valor em Estoque", formatar_moeda(k.current_inventory_value)],
        ["Compras no Período", formatar_moeda(k.total_purchases_period)],
        ["Saídas no Período", formatar_moeda(k.total_exits_period)],
        ["Itens Ativos", k.total_items],
        ["Itens Críticos", k.critical_stock_items],
        ["Itens em Excesso", k.excess_stock_items],
        ["Itens Parados", k.dead_stock_items_90d],
    ])

    if payload.alerts:
        alertas = _tabela(["Tipo", "Produto", "Saldo", "Sugestão"], [
            [
                f'<strong style="color:{CORES_ALERTA[a.type.value]};">{a.type.value}</strong>',
                escape(a.product),
                f"{a.current_stock:g}",
                escape(a.suggestion),
            ]
            for a in payload.alerts
        ])
    else:
        alertas = '<p style="color:#6b7280;">Nenhum alerta no período.</p>'

    curva_a = payload.abc.curve_a
    if curva_a:
        abc = _tabela(["Produto", "Consumo", "% Acumulado"], [
            [escape(i.product), formatar_moeda(i.consumption_value), f"{i.percentage:.2f}%"]
            for i in curva_a
        ])
    else:
        abc = '<p style="color:#6b7280;">Sem consumo registrado no período.</p>'

    parados = ""
    if payload.dead_stock:
        parados = (
            f'<h2 style="font-size:18px;">Itens Parados (+{payload.rules.dead_stock_days} dias)</h2>'
            + _tabela(["Produto", "Dias", "Valor"], [
                [escape(d.product), d.days_without_movement, formatar_moeda(d.value)]
                for d in payload.dead_stock
            ])
        )

    return f"""<!DOCTYPE html>
<html lang="pt-BR">
<head><meta charset="UTF-8"><title>Relatório de Otimização</title></head>
<body style="margin:0;padding:0;font-family:'Helvetica Neue',Helvetica,Arial,sans-serif;background-color:#f3f4f6;color:#1f2937;">
<div style="max-width:600px;margin:0 auto;background-color:#ffffff;">
<div style="background-color:{COR_DESTAQUE};padding:14px 24px;color:#ffffff;font-weight:700;">Relatório de Otimização de Estoque</div>
<div style="padding:24px;">
<p style="margin:0;font-size:14px;color:#6b7280;">{escape(payload.company.name)} &middot; Período Analisado</p>
<p style="margin:4px 0 24px;font-size:16px;font-weight:700;">{periodo}</p>
<h2 style="font-size:18px;">Indicadores Chave</h2>
{kpis}
<h2 style="font-size:18px;">Alertas</h2>
{alertas}
<h2 style="font-size:18px;">Curva A (Maior Consumo)</h2>
{abc}
{parados}
<p style="font-size:12px;color:#9ca3af;text-align:center;">Este relatório foi gerado automaticamente com base nos dados do seu estoque.</p>
</div>
</div>
</body>
</html>"""
