class RelatorioError(Exception):
    """Erro base do gerador de relatórios de estoque."""


class InvalidRangeError(RelatorioError, ValueError):
    """Período inválido (início após o fim ou data ilegível)."""


class MissingCompanyContextError(RelatorioError):
    """Nenhuma empresa autenticada no contexto da requisição."""


class UpstreamFetchError(RelatorioError):
    """Falha ao buscar um dos snapshots na fonte de dados."""

    def __init__(self, operacao: str, mensagem: str):
        self.operacao = operacao
        super().__init__(f"Falha em '{operacao}': {mensagem}")


class EmailDeliveryError(RelatorioError):
    pass


class EmailConfigurationError(EmailDeliveryError):
    pass
