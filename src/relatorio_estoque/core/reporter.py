import json
from pathlib import Path
from datetime import datetime
from typing import Dict, Any

from ..models.payload import AiReportPayload

class ExecutionReporter:
    """
    Guarda o último payload gerado em JSON estruturado.
    Permite reenviar/auditar o relatório sem recalcular.
    """
    
    def __init__(self, data_dir: Path):
        self.report_path = data_dir / "cache" / "ultimo_relatorio.json"
        self.report_path.parent.mkdir(parents=True, exist_ok=True)

    def salvar_payload(self, payload: AiReportPayload, company_id: str | None = None):
        """Salva o payload com metadados da execução."""
        conteudo = {
            "timestamp": datetime.now().isoformat(),
            "status": "success",
            "company_id": company_id,
            "data": payload.model_dump(mode="json")
        }
        
        with open(self.report_path, 'w', encoding='utf-8') as f:
            json.dump(conteudo, f, indent=2, ensure_ascii=False)
            
    def ler_ultimo_status(self) -> Dict[str, Any]:
        """Lê o último relatório gerado."""
        if not self.report_path.exists():
            return {}
            
        with open(self.report_path, 'r', encoding='utf-8') as f:
            return json.load(f)

    def ler_ultimo_payload(self) -> AiReportPayload | None:
        status = self.ler_ultimo_status()
        if not status.get("data"):
            return None
        return AiReportPayload.model_validate(status["data"])

    def limpar_stats_anteriores(self):
        """Remove dados antigos para evitar falsos positivos."""
        self.report_path.unlink(missing_ok=True)
