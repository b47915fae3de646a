"""
File utilities module for common file operations.
"""

import os
import pandas as pd
import logging

logger = logging.getLogger(__name__)


def ensure_directory(directory: str) -> None:
    """
    Ensure a directory exists, creating it if necessary.

    Args:
        directory: Directory path to create
    """
    if not directory:
        return
    if not os.path.exists(directory):
        logger.info(f"Creating directory: {directory}")
        os.makedirs(directory, exist_ok=True)
    else:
        logger.debug(f"Directory already exists: {directory}")


def save_dataframe(df: pd.DataFrame,
                   output_path: str,
                   format: str = 'tsv',
                   **kwargs) -> None:
    """
    Save DataFrame to file in specified format.

    Args:
        df: DataFrame to save
        output_path: Output file path
        format: Output format ('tsv', 'csv')
        **kwargs: Additional arguments for pandas save methods
    """
    logger.info(f"Saving DataFrame to {output_path} in {format} format")

    ensure_directory(os.path.dirname(output_path))

    if format.lower() == 'tsv':
        df.to_csv(output_path, sep='\t', index=False, **kwargs)
    elif format.lower() == 'csv':
        df.to_csv(output_path, index=False, **kwargs)
    else:
        raise ValueError(f"Unsupported format: {format}")

    logger.info(f"DataFrame saved successfully: {len(df)} rows")
