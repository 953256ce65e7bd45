from a11y_audit.cli import cli

if __name__ == "__main__":
    cli()
