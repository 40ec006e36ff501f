# tests/conftest.py
import pytest
import sys
from datetime import date
from pathlib import Path

# Adiciona o src ao path para importar os módulos do sistema
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.append(str(PROJECT_ROOT / "src"))

from relatorio_estoque.core.config import ParametrosRelatorio
from relatorio_estoque.data_engine.fonte_dados import FonteMemoria


@pytest.fixture
def parametros():
    """Parâmetros padrão (mesmos valores do config/parametros.yaml)."""
    return ParametrosRelatorio()


@pytest.fixture
def dados_almoxarifado():
    """
    Cenário de janeiro/2024 no formato do banco (camelCase):
    - Parafuso e Luva abaixo do mínimo (ruptura)
    - Cimento com 50 un. para mínimo 10 (excesso)
    - Tinta sem movimento desde 01/06/2023 (parado)
    - Fita normal; Inativo fora de tudo
    """
    produtos = [
        {"id": "1", "description": "Parafuso", "minStock": 10, "pmed": 2.0},
        {"id": "2", "description": "Luva", "minStock": 20, "pmed": 5.0},
        {"id": "3", "description": "Cimento", "minStock": 10, "pmed": 30.0},
        {"id": "4", "description": "Tinta", "minStock": 0, "pmed": 80.0, "createdAt": "2023-01-01T08:00:00Z"},
        {"id": "5", "description": "Inativo", "minStock": 100, "pmed": 1.0, "active": False},
        {"id": "6", "description": "Fita", "minStock": 5, "pmed": 10.0},
    ]
    movimentacoes = [
        {"id": "m1", "productId": "6", "type": "OUT", "quantity": 5, "totalValue": 800.0, "movementDate": "2024-01-10"},
        {"id": "m2", "productId": "3", "type": "OUT", "quantity": 10, "totalValue": 150.0, "movementDate": "2024-01-15"},
        {"id": "m3", "productId": "1", "type": "OUT", "quantity": 2, "totalValue": 50.0, "movementDate": "2024-01-20T14:30:00"},
        {"id": "m4", "productId": "3", "type": "IN", "quantity": 20, "totalValue": 600.0, "movementDate": "2024-01-05"},
        {"id": "m5", "productId": "4", "type": "IN", "quantity": 3, "totalValue": 240.0, "movementDate": "2023-06-01"},
        {"id": "m6", "productId": "2", "type": "OUT", "quantity": 1, "totalValue": 5.0, "movementDate": "2024-02-10"},
    ]
    saldos = [
        {"productId": "1", "locationId": "L1", "quantity": 4},
        {"productId": "2", "locationId": "L1", "quantity": 5},
        {"productId": "3", "locationId": "L1", "quantity": 30},
        {"productId": "3", "locationId": "L2", "quantity": 20},
        {"productId": "4", "locationId": "L1", "quantity": 3},
        {"productId": "6", "locationId": "L1", "quantity": 10},
    ]
    empresa = {"id": "emp-1", "name": "Aura Ltda", "cnpj": "12.345.678/0001-90", "sectorName": "Almoxarifado"}
    return {"produtos": produtos, "movimentacoes": movimentacoes, "saldos": saldos, "empresa": empresa}


@pytest.fixture
def fonte_memoria(dados_almoxarifado):
    return FonteMemoria(
        produtos=dados_almoxarifado["produtos"],
        movimentacoes=dados_almoxarifado["movimentacoes"],
        saldos=dados_almoxarifado["saldos"],
        empresa=dados_almoxarifado["empresa"],
        usuario={"id": "u1", "companyId": "emp-1", "name": "Carla"},
    )


@pytest.fixture
def periodo_janeiro():
    return date(2024, 1, 1), date(2024, 1, 31)
