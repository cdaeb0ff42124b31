from avocado_client.cli import main

main()
