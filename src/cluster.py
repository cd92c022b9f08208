import sys

from graphcluster.clustering import GraphClustering
from graphcluster.config import load_config
from graphcluster.data import load
from graphcluster.errors import IngestionFailure, InvalidClusterCount
from graphcluster.logger import configure_file_logging, setup_logger
from graphcluster.report import print_summary


def main(env_file="./.env"):
    config = load_config(env_file)
    logger = setup_logger('cluster')
    if config['LOG_DIR']:
        configure_file_logging(config['LOG_DIR'])
    logger.info(f"Clustering entities from {config['DATA_PATH']}")

    try:
        records = load(config['DATA_PATH'])
    except IngestionFailure as e:
        logger.critical(f"Could not load input data: {e}")
        return 1

    clustering_analysis = GraphClustering(
        records,
        n_clusters=config['N_CLUSTERS'],
        policy=config['POLICY'],
        year_scale=config['YEAR_SCALE'],
        resolution=config['RESOLUTION'],
        random_state=config['RANDOM_STATE'],
        output_dir=config['OUTPUT_DIR'],
        parallel=config['PARALLEL'],
    )

    try:
        result = clustering_analysis.run_pipeline(create_visualizations=config['CREATE_VISUALIZATIONS'])
    except InvalidClusterCount as e:
        logger.error(f"Invalid N_CLUSTERS: {e}")
        return 2

    print_summary(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
