"""Application entrypoint."""

import base64
import os


def main() -> None:
    """Print how to run the service and a fresh encryption key.

    Returns
    -------
    None
        Prints the uvicorn command and a base64 key suitable for
        ``SURVEY_DESK_ENCRYPTION_KEY``.
    """
    print("Run with: uvicorn app.main:app --reload")
    print(f"SURVEY_DESK_ENCRYPTION_KEY={base64.b64encode(os.urandom(32)).decode()}")


if __name__ == "__main__":
    main()
