# tests/unit/test_estoque_math.py
import polars as pl
from datetime import date
from relatorio_estoque.models.entidades import Movimentacao, Produto, SaldoEstoque
from relatorio_estoque.rule_engine.stock.estoque_math import EstoqueMath

def _produtos():
    return EstoqueMath.produtos_para_df([
        Produto(id="1", descricao="Parafuso", estoque_minimo=10, pmed=2.0),
        Produto(id="2", descricao="Luva", estoque_minimo=0, pmed=5.0, criado_em=date(2023, 1, 1)),
        Produto(id="3", descricao="Antigo", estoque_minimo=5, pmed=1.0, ativo=False),
    ])

def _movimentos():
    return EstoqueMath.movimentacoes_para_df([
        Movimentacao(id="a", produto_id="1", tipo="OUT", quantidade=3, valor_total=6.0, data_movimento=date(2024, 1, 10)),
        Movimentacao(id="b", produto_id="1", tipo="IN", quantidade=10, valor_total=20.0, data_movimento=date(2023, 12, 20)),
        Movimentacao(id="c", produto_id="1", tipo="OUT", quantidade=1, valor_total=2.0, data_movimento=date(2024, 3, 1)),
    ])

def test_posicao_soma_saldos_entre_locais_e_ignora_inativos():
    saldos = EstoqueMath.saldos_para_df([
        SaldoEstoque(produto_id="1", local_id="A", quantidade=4),
        SaldoEstoque(produto_id="1", local_id="B", quantidade=6),
        SaldoEstoque(produto_id="3", local_id="A", quantidade=99),
    ])
    df = EstoqueMath.montar_posicao(_produtos(), saldos).sort("id")

    assert df["id"].to_list() == ["1", "2"]
    assert df["saldo_atual"].to_list() == [10.0, 0.0]
    assert df["valor_estoque"].to_list() == [20.0, 0.0]

def test_filtro_de_periodo_inclui_as_pontas():
    df = EstoqueMath.filtrar_periodo(_movimentos(), date(2023, 12, 20), date(2024, 1, 10))
    assert sorted(df["id"].to_list()) == ["a", "b"]

def test_totais_e_consumo_do_periodo():
    periodo = EstoqueMath.filtrar_periodo(_movimentos(), date(2023, 12, 1), date(2024, 1, 31))

    assert EstoqueMath.total_por_tipo(periodo, "IN") == 20.0
    assert EstoqueMath.total_por_tipo(periodo, "OUT") == 6.0

    consumo = EstoqueMath.consumo_por_produto(periodo).row(0, named=True)
    assert consumo == {"produto_id": "1", "consumo_valor": 6.0, "consumo_qtd": 3.0}

def test_totais_de_periodo_vazio_sao_zero():
    periodo = EstoqueMath.filtrar_periodo(_movimentos(), date(2020, 1, 1), date(2020, 1, 31))
    assert EstoqueMath.total_por_tipo(periodo, "IN") == 0.0

def test_dias_parado_ignora_movimentos_apos_referencia_e_usa_cadastro():
    posicao = EstoqueMath.montar_posicao(_produtos(), EstoqueMath.saldos_para_df([]))
    df = EstoqueMath.calcular_dias_parado(posicao, _movimentos(), date(2024, 1, 31)).sort("id")

    dias = dict(zip(df["id"].to_list(), df["dias_sem_movimento"].to_list()))
    # Parafuso: última saída válida 10/01 (a de 01/03 é posterior à referência)
    assert dias["1"] == 21
    # Luva nunca movimentou: conta do cadastro
    assert dias["2"] == (date(2024, 1, 31) - date(2023, 1, 1)).days

def test_marcar_situacao():
    df = pl.DataFrame({
        "saldo_atual": [5.0, 31.0, 30.0, 0.0, 7.0],
        "estoque_minimo": [10.0, 10.0, 10.0, 0.0, 0.0],
        "valor_estoque": [50.0, 310.0, 300.0, 0.0, 70.0],
        "dias_sem_movimento": [1, 1, 1, 500, None],
    })
    df = EstoqueMath.marcar_situacao(df, multiplo_excesso=3.0, dias_parado=90)

    assert df["em_ruptura"].to_list() == [True, False, False, False, False]
    # 30 não é MAIOR que 3x10; mínimo 0 nunca gera excesso
    assert df["em_excesso"].to_list() == [False, True, False, False, False]
    # Sem valor em estoque ou sem idade conhecida não é parado
    assert df["sem_movimento"].to_list() == [False, False, False, True, False]
    assert df["parado"].to_list() == [False, False, False, False, False]

def test_parado_so_acima_do_limite_de_dias():
    df = pl.DataFrame({
        "saldo_atual": [1.0, 1.0, 1.0], "estoque_minimo": [0.0, 0.0, 0.0],
        "valor_estoque": [10.0, 10.0, 10.0], "dias_sem_movimento": [89, 90, 91],
    })
    df = EstoqueMath.marcar_situacao(df, 3.0, 90)

    # Exatamente 90 dias ainda não conta
    assert df["sem_movimento"].to_list() == [False, False, True]
    assert df["parado"].to_list() == [False, False, True]

def test_saldo_igual_ao_minimo_nao_e_ruptura():
    df = pl.DataFrame({
        "saldo_atual": [10.0], "estoque_minimo": [10.0], "valor_estoque": [10.0], "dias_sem_movimento": [0],
    })
    assert EstoqueMath.marcar_situacao(df, 3.0, 90)["em_ruptura"].item() is False
