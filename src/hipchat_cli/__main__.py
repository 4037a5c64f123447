from hipchat_cli.main import main

main(prog_name="hipchat")
