from termglobe.cli import main

main()
