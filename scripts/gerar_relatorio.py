import sys
from pathlib import Path

# Adiciona o diretório 'src' ao path para rodar sem instalar o pacote
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.append(str(PROJECT_ROOT / "src"))

from relatorio_estoque.cli import main

if __name__ == "__main__":
    sys.exit(main())
