import duckdb
from pathlib import Path
from contextlib import contextmanager
from threading import Lock
import structlog

logger = structlog.get_logger(__name__)

# Tabelas que a fonte de snapshots lê do banco anexado
TABELAS_CRITICAS = ["produtos", "movimentacoes", "saldos_estoque", "empresas"]


class DuckDBManager:
    """
    Gerenciador de conexões DuckDB sobre o banco SQLite do almoxarifado.
    Anexa o SQLite em modo somente leitura e valida as tabelas críticas.
    """
    
    def __init__(self, memory_limit: str = "1GB", threads: int = 4):
        self.memory_limit = memory_limit
        self.threads = threads
        self._conn = None
        self._lock = Lock()
        
    def initialize(self, sqlite_path: Path):
        """
        Inicializa conexão DuckDB, anexa o SQLite e VALIDA a estrutura.
        Se falhar, aborta imediatamente.
        """
        if not sqlite_path.exists():
            msg = f"CRÍTICO: Banco de dados não encontrado em {sqlite_path}"
            logger.critical("db_not_found", path=str(sqlite_path))
            raise FileNotFoundError(msg)

        with self._lock:
            self._fechar_sem_lock()
                
            try:
                self._conn = duckdb.connect(":memory:")
                self._conn.execute(f"SET memory_limit='{self.memory_limit}'")
                self._conn.execute(f"SET threads TO {self.threads}")
                
                logger.info("connecting_sqlite", path=str(sqlite_path))
                self._conn.execute(f"""
                    ATTACH '{str(sqlite_path)}' AS sqlite_db (TYPE SQLITE, READ_ONLY)
                """)
                
                self._validar_tabelas_criticas()
                
                logger.info("duckdb_initialized_successfully")

            except Exception as e:
                # Não deixa um objeto "zumbi" para trás
                self._fechar_sem_lock()
                logger.critical("duckdb_init_failed", error=str(e))
                raise RuntimeError(f"Falha Crítica na Inicialização do Banco: {e}") from e

    def _validar_tabelas_criticas(self):
        """Verifica se as tabelas essenciais existem no banco anexado."""
        df_tables = self._conn.execute("""
            SELECT table_name 
            FROM information_schema.tables 
            WHERE table_catalog = 'sqlite_db'
        """).pl()
        
        tabelas_existentes = [t.lower() for t in df_tables["table_name"].to_list()]
        faltantes = [t for t in TABELAS_CRITICAS if t not in tabelas_existentes]
        if faltantes:
            raise ValueError(f"Tabelas obrigatórias não encontradas no banco de dados: {faltantes}")
                
        logger.info("schema_validation_passed", tables=TABELAS_CRITICAS)

    @contextmanager
    def get_connection(self):
        """Context manager para obter conexão thread-safe."""
        with self._lock:
            if self._conn is None:
                raise RuntimeError("ERRO INTERNO: Tentativa de usar DuckDB sem inicialização (initialize() não foi chamado ou falhou).")
            yield self._conn

    def _fechar_sem_lock(self):
        if self._conn is not None:
            try:
                self._conn.close()
            except duckdb.Error as e:
                logger.warning("error_closing_connection", error=str(e))
            finally:
                self._conn = None

    def close(self):
        """Fecha conexão DuckDB."""
        with self._lock:
            self._fechar_sem_lock()
            logger.info("duckdb_closed")
