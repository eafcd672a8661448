from jetlagged.main import main

main()
