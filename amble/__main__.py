"""Allow running amble with `python -m amble`"""
from .main import main

main(prog_name='amble')
