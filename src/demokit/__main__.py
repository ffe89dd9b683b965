from demokit.ui.cli import run

run()
