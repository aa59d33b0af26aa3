from candlevote.main import main

main()
