import logging

import uvicorn

from expense_parser.config import PipelineConfig

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    config = PipelineConfig.from_env()
    uvicorn.run("expense_parser.api:app", host=config.host, port=config.port)
