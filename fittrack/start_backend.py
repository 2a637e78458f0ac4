#!/usr/bin/env python3
"""
Backend startup wrapper.

    $ python -m fittrack.start_backend
"""
import os
import sys

print("[Backend] Starting FitTrack Backend")
print("[Backend] Press CTRL+C to stop")
print()

if __name__ == "__main__":
    try:
        import uvicorn
        uvicorn.run(
            "fittrack.main:app",
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8000")),
            reload=False,
            log_level="info",
            access_log=True
        )
    except KeyboardInterrupt:
        print("\n[Backend] Shutting down...")
        sys.exit(0)
