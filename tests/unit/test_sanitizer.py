import logging
import polars as pl
from relatorio_estoque.utils.sanitizer import avisar_saldos_negativos, sanear_produtos

def test_blindagem_pmed_e_minimo(caplog):
    df = pl.DataFrame({
        "id": ["1", "2", "3"],
        "pmed": [-5.0, None, 10.0],
        "estoque_minimo": [None, -2.0, 4.0],
        "ativo": [True, None, False],
    })
    with caplog.at_level(logging.WARNING, logger="Sanitizer"):
        df = sanear_produtos(df)

    assert df["pmed"].to_list() == [0.0, 0.0, 10.0]
    assert df["estoque_minimo"].to_list() == [0.0, 0.0, 4.0]
    assert df["ativo"].to_list() == [True, True, False]
    assert "PMED negativo" in caplog.text

def test_dataframe_vazio_passa_direto():
    df = pl.DataFrame({"pmed": []}, schema={"pmed": pl.Float64})
    assert sanear_produtos(df).height == 0

def test_saldos_negativos_apenas_avisados():
    df = pl.DataFrame({"produto_id": ["1", "2"], "quantidade": [-3.0, 4.0]})
    assert avisar_saldos_negativos(df) == 1
    assert df["quantidade"].to_list() == [-3.0, 4.0]
