"""Allow running the assembler with `python -m hexasm`."""

from hexasm.cli.hexasm import main

if __name__ == "__main__":
    main()
