import pytest
from pathlib import Path
from pydantic import ValidationError
from relatorio_estoque.core.config import ConfigManager, ParametrosRelatorio

PROJECT_CONFIG = Path(__file__).resolve().parents[2] / "config"

def test_yaml_do_projeto_carrega_padroes():
    parametros = ParametrosRelatorio.from_yaml(PROJECT_CONFIG / "parametros.yaml")

    assert parametros.parado.dias_sem_movimento == 90
    assert parametros.estoque.multiplo_excesso == 3.0
    assert parametros.cortes_abc == pytest.approx((0.80, 0.95))

def test_yaml_parcial_mantem_padroes(tmp_path):
    (tmp_path / "parametros.yaml").write_text("parado:\n  dias_sem_movimento: 30\n", encoding="utf-8")
    parametros = ParametrosRelatorio.from_yaml(tmp_path / "parametros.yaml")

    assert parametros.parado.dias_sem_movimento == 30
    assert parametros.estoque.metodo_estoque_minimo == "Manual (Cadastro)"

def test_arquivo_inexistente(tmp_path):
    with pytest.raises(FileNotFoundError):
        ParametrosRelatorio.from_yaml(tmp_path / "nao_existe.yaml")

def test_multiplo_invalido():
    with pytest.raises(ValidationError):
        ParametrosRelatorio(estoque={"multiplo_excesso": 0})

def test_config_manager_singleton():
    mgr = ConfigManager()
    mgr.reset()
    with pytest.raises(RuntimeError):
        mgr.parametros

    mgr.load_configs(PROJECT_CONFIG)
    assert ConfigManager() is mgr
    assert ConfigManager().parametros.parado.dias_sem_movimento == 90
    mgr.reset()
