from userdb.demo import main

main()
