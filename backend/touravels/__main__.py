from touravels.main import run

run()
