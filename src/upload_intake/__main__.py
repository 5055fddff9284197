from upload_intake.cli import main

main()
