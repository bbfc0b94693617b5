import uvicorn
from workout_session.config import config


def main():
    # Parse modes before the app (and its logger) is imported
    config.setup_from_args()
    from workout_session.main import app

    # Display startup information with available command-line options
    print("\n" + "="*60)
    print("Workout Session Engine")
    print("="*60)
    print(f"Mode: {config.mode_description}")
    print(f"Ticks: {'server-driven' if config.server_ticks else 'client-driven (POST /sessions/{id}/tick)'}")
    print("\nAvailable modes:")
    print("  workout-session --mode debug          # Verbose transitions")
    print("  workout-session --mode debug_no_save  # Standard logging")
    print("  workout-session --mode non_debug      # Minimal logging only")
    print("  workout-session --client-ticks        # Let clients drive the countdown")
    print("="*60 + "\n")

    # Start FastAPI server with CORS enabled for cross-origin requests
    uvicorn.run(app, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
