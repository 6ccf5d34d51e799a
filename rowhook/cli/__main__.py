from rowhook.cli import main

main()
