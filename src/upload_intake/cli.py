from upload_intake.backend.app.runner import run as api_run
from upload_intake.shared.proc import terminate_tree


def main():
    api_proc = api_run()
    try:
        # Wait until the API exits (or Ctrl+C in this terminal)
        api_proc.wait()
    except KeyboardInterrupt:
        print("\n Ctrl+C received, shutting down...")
    finally:
        terminate_tree(api_proc)
