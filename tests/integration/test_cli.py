# tests/integration/test_cli.py
import json
import pytest

from relatorio_estoque.cli import carregar_parametros, criar_parser, executar, main
from relatorio_estoque.core.system_guard import SystemGuard
from relatorio_estoque.notificacao.email_sender import MensagemEmail


class EnviadorFake:
    def __init__(self):
        self.enviadas: list[MensagemEmail] = []

    def enviar(self, mensagem: MensagemEmail) -> str:
        self.enviadas.append(mensagem)
        return "fake-1"


@pytest.mark.asyncio
async def test_executar_gera_json_excel_e_email(fonte_memoria, parametros, tmp_path):
    args = criar_parser().parse_args([
        "--inicio", "2024-01-01", "--fim", "2024-01-31", "--empresa", "emp-1",
        "--saida", str(tmp_path), "--excel", "--email", "gestor@aura.com, compras@aura.com",
    ])
    guard = SystemGuard(tmp_path / "logs")
    enviador = EnviadorFake()

    payload = await executar(args, fonte_memoria, parametros, guard, enviador=enviador)

    salvo = json.loads((tmp_path / "cache" / "ultimo_relatorio.json").read_text(encoding="utf-8"))
    assert salvo["data"]["kpis"]["critical_stock_items"] == payload.kpis.critical_stock_items
    assert list((tmp_path / "exports").glob("relatorio_estoque_*.xlsx"))

    assert len(enviador.enviadas) == 1
    mensagem = enviador.enviadas[0]
    assert mensagem.to == ["gestor@aura.com", "compras@aura.com"]
    assert mensagem.subject == "📈 Relatório de Otimização - Aura Ltda"
    assert "Luva" in mensagem.html


@pytest.mark.asyncio
async def test_executar_resolve_empresa_pelo_usuario(fonte_memoria, parametros, tmp_path):
    args = criar_parser().parse_args([
        "--inicio", "2024-01-01", "--fim", "2024-01-31", "--usuario", "u1", "--saida", str(tmp_path),
    ])
    payload = await executar(args, fonte_memoria, parametros, SystemGuard(tmp_path / "logs"))

    assert payload.company.name == "Aura Ltda"
    assert not (tmp_path / "exports").exists()


def test_parser_exige_empresa_ou_usuario():
    with pytest.raises(SystemExit):
        criar_parser().parse_args(["--inicio", "2024-01-01", "--fim", "2024-01-31"])


def test_carregar_parametros_sem_yaml_usa_padrao(tmp_path):
    assert carregar_parametros(tmp_path).parado.dias_sem_movimento == 90


def test_main_com_banco_inexistente_retorna_erro(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    codigo = main([
        "--inicio", "2024-01-01", "--fim", "2024-01-31", "--empresa", "emp-1",
        "--db", str(tmp_path / "nao_existe.db"),
    ])
    assert codigo == 1


def test_main_com_parametros_invalidos_retorna_erro(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    config = tmp_path / "config"
    config.mkdir()
    (config / "parametros.yaml").write_text("estoque:\n  multiplo_excesso: 0\n", encoding="utf-8")

    codigo = main([
        "--inicio", "2024-01-01", "--fim", "2024-01-31", "--empresa", "emp-1",
        "--config", str(config), "--db", str(tmp_path / "nao_existe.db"),
    ])
    assert codigo == 1
