import logging
import sys
from pathlib import Path
from datetime import datetime

class SystemGuard:
    def __init__(self, log_dir: Path):
        self.log_dir = log_dir
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.setup_logger()

    def setup_logger(self):
        filename = f"relatorio_log_{datetime.now().strftime('%Y-%m-%d')}.txt"
        self.log_path = self.log_dir / filename
        
        logging.basicConfig(
            level=logging.INFO,
            format='%(asctime)s | %(levelname)s | %(message)s',
            handlers=[
                logging.FileHandler(self.log_path, encoding='utf-8'),
                logging.StreamHandler(sys.stdout)
            ]
        )
        self.logger = logging.getLogger("Relatorio_Guard")

    def log(self, message):
        self.logger.info(message)

    def log_performance(self, task_name, start_time):
        elapsed = (datetime.now() - start_time).total_seconds()
        self.logger.info(f"⏱️ Tarefa '{task_name}' concluída em {elapsed:.2f} segundos.")
        return elapsed
