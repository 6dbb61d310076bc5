import logging

from dotenv import load_dotenv

load_dotenv()

from database import init_db

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()
    print("Database initialized")
