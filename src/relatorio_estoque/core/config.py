from pathlib import Path
from typing import Dict
import yaml
from pydantic import BaseModel, Field

# --- CLASSES AUXILIARES ---
class EstoqueConfig(BaseModel):
    # Saldo acima de (multiplo x mínimo) é considerado excesso
    multiplo_excesso: float = Field(default=3.0, gt=0)
    metodo_estoque_minimo: str = "Manual (Cadastro)"

class ParadoConfig(BaseModel):
    dias_sem_movimento: int = Field(default=90, ge=1)

class EmailConfig(BaseModel):
    remetente: str = "Aura Almoxarife <onboarding@resend.dev>"
    api_url: str = "https://api.resend.com/emails"
    timeout_segundos: float = Field(default=15.0, gt=0)

# ----------------------------------------------------------

class ParametrosRelatorio(BaseModel):
    abc: Dict[str, float] = Field(default_factory=lambda: {"A": 80.0, "B": 15.0, "C": 5.0})
    estoque: EstoqueConfig = Field(default_factory=EstoqueConfig)
    parado: ParadoConfig = Field(default_factory=ParadoConfig)
    email: EmailConfig = Field(default_factory=EmailConfig)

    @property
    def cortes_abc(self) -> tuple[float, float]:
        """Cortes acumulados (0-1) das curvas A e B. Ex: A=80, B=15 -> (0.80, 0.95)."""
        pct_a = self.abc.get("A", 80.0) / 100.0
        pct_b = self.abc.get("B", 15.0) / 100.0
        return pct_a, pct_a + pct_b

    @classmethod
    def from_yaml(cls, path: Path) -> "ParametrosRelatorio":
        if not path.exists():
            raise FileNotFoundError(f"Arquivo de configuração não encontrado: {path}")
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
        return cls(**data)

class ConfigManager:
    """Singleton para gerenciamento de configurações."""
    
    _instance = None
    _parametros: ParametrosRelatorio | None = None
    
    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance
    
    def load_configs(self, config_dir: Path):
        """Carrega os parâmetros do relatório a partir de parametros.yaml."""
        self._parametros = ParametrosRelatorio.from_yaml(
            config_dir / "parametros.yaml"
        )

    def reset(self):
        self._parametros = None

    @property
    def parametros(self) -> ParametrosRelatorio:
        if self._parametros is None:
            raise RuntimeError("Configurações não carregadas. Chame load_configs() primeiro.")
        return self._parametros
