from ruw.cli import main

main()
