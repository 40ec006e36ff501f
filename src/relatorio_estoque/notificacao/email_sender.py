from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Optional, Protocol

import httpx
import structlog

from ..core.config import EmailConfig
from ..core.exceptions import EmailConfigurationError, EmailDeliveryError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class MensagemEmail:
    to: List[str]
    subject: str
    html: str
    remetente: Optional[str] = None


class EnviadorEmail(Protocol):
    """Interface de entrega: recebe {to, subject, html} e devolve o id da mensagem."""

    def enviar(self, mensagem: MensagemEmail) -> str: ...


def separar_destinatarios(texto: str) -> List[str]:
    """'a@x.com, b@y.com,' -> ['a@x.com', 'b@y.com']"""
    return [e.strip() for e in (texto or "").split(",") if e.strip()]


@dataclass
class EnviadorResend:
    config: EmailConfig = field(default_factory=EmailConfig)
    api_key: Optional[str] = None
    client: Optional[httpx.Client] = None

    def _get_api_key(self) -> str:
        key = self.api_key or os.environ.get("RESEND_API_KEY")
        if not key:
            raise EmailConfigurationError("RESEND_API_KEY não configurada no ambiente.")
        return key

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self._get_api_key()}",
            "Content-Type": "application/json",
        }

    def enviar(self, mensagem: MensagemEmail) -> str:
        if not mensagem.to:
            raise EmailConfigurationError("Nenhum destinatário informado.")

        corpo = {
            "from": mensagem.remetente or self.config.remetente,
            "to": list(mensagem.to),
            "subject": mensagem.subject,
            "html": mensagem.html,
        }
        client = self.client or httpx.Client(timeout=self.config.timeout_segundos)
        try:
            response = client.post(self.config.api_url, json=corpo, headers=self._headers())
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error("email_rejeitado", status=exc.response.status_code)
            raise EmailDeliveryError(f"Resend error ({exc.response.status_code}): {exc.response.text}") from exc
        except httpx.HTTPError as exc:
            logger.error("email_falha_conexao", error=str(exc))
            raise EmailDeliveryError(f"Resend connection error: {exc}") from exc
        finally:
            if self.client is None:
                client.close()

        message_id = response.json().get("id", "")
        logger.info("email_enviado", destinatarios=len(mensagem.to), id=message_id)
        return message_id


def enviar_relatorio(enviador: EnviadorEmail, destinatarios: List[str], empresa: str, html: str) -> str:
    """Envia o relatório renderizado (assunto no padrão 'Relatório de Otimização - Empresa')."""
    mensagem = MensagemEmail(
        to=destinatarios,
        subject=f"📈 Relatório de Otimização - {empresa}",
        html=html,
    )
    return enviador.enviar(mensagem)
