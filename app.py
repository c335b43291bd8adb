# app.py
"""
Entrypoint da aplicação.

Uso:
  python app.py migrate --db drp.db
  python app.py params show
  python app.py importar vendas vendas.xlsx
  python app.py importar estoque estoque.xlsx
  python app.py drp produto 12345 --origem 04
  python app.py drp nf nf_entrada.xlsx
  python app.py minimo batch
"""

from drp.adapters.cli import main

if __name__ == "__main__":
    main()
