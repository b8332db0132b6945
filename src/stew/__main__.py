from stew.cli.cli import main

main()
