"""
Command-line interface for the codon-structure pipeline.
"""

import math
import os
import sys
import logging
from typing import Any, Dict, Optional
import click
import pandas as pd

from .analysis.codon_weights import CodonWeightTable, available_species
from .analysis.correlations import FEATURES, CorrelationEngine, CorrelationResult
from .analysis.evaluation import Evaluation
from .exceptions import CodonStructureError, ConfigError
from .parsers.sequence_parser import load_gene_list
from .sources.base import StructuralDataSource
from .sources.local import LocalDataSource
from .sources.remote import RemoteDataSource
from .utils.config_loader import (create_example_config, expand_paths, get_default_config,
                                  load_config, merge_configs, validate_config,
                                  validate_file_paths)
from .utils.file_utils import ensure_directory, save_dataframe
from .utils.warnings_config import configure_warnings
from .viz.plots import create_correlation_scatter, create_evaluation_boxplot

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def build_weights(config: Dict[str, Any]) -> CodonWeightTable:
    """Build the codon weight table named by the configuration."""
    weights_config = config['weights']
    if weights_config.get('table'):
        return CodonWeightTable.from_file(weights_config['table'])
    return CodonWeightTable.for_species(weights_config['species'])


def build_source(config: Dict[str, Any]) -> StructuralDataSource:
    """Build the data source named by the configuration."""
    source_config = config['source']
    if source_config['type'] == 'remote':
        return RemoteDataSource(
            dssp_executable=source_config.get('dssp', 'mkdssp'),
            cache_size=int(source_config.get('cache_size', 256)),
            timeout=float(source_config.get('timeout', 60)),
            domain_classification=source_config.get('domain_classification', 'cath')
        )
    return LocalDataSource(
        source_config['data_dir'],
        dssp_executable=source_config.get('dssp', 'mkdssp'),
        cache_size=int(source_config.get('cache_size', 256))
    )


def build_engine(config: Dict[str, Any],
                 engine_logger: Optional[logging.Logger] = None) -> CorrelationEngine:
    """Build a correlation engine with its gene list set."""
    logger.info("Initializing codon weight table")
    weights = build_weights(config)
    logger.info("Initializing data source")
    source = build_source(config)

    engine = CorrelationEngine(
        weights,
        source,
        logger=engine_logger,
        frame_policy=config['analysis']['frame_policy']
    )
    logger.info("Parsing gene identifiers")
    engine.set_genes(load_gene_list(config['genes']))
    return engine


def _prepare_config(config: Optional[str],
                    genes: Optional[str],
                    data_dir: Optional[str],
                    outdir: Optional[str],
                    frame_policy: Optional[str],
                    figure_format: Optional[str]) -> Dict[str, Any]:
    """Load the config file (or defaults) and apply command-line overrides."""
    if config:
        config_data = expand_paths(load_config(config), os.path.dirname(os.path.abspath(config)))
    else:
        if not genes:
            raise ConfigError("Must provide either --config or --genes")
        config_data = get_default_config()

    overrides: Dict[str, Any] = {'analysis': {}, 'source': {}}
    if genes:
        overrides['genes'] = os.path.abspath(genes)
    if data_dir:
        overrides['source']['data_dir'] = os.path.abspath(data_dir)
    if outdir:
        overrides['output_dir'] = os.path.abspath(outdir)
    if frame_policy:
        overrides['analysis']['frame_policy'] = frame_policy
    if figure_format:
        overrides['figure_format'] = figure_format

    config_data = merge_configs(config_data, overrides)
    validate_config(config_data)
    return config_data


def _setup_logging(log_file: Optional[str], verbose: bool = False, quiet: bool = False) -> None:
    """Set up logging to the console and, if given, a file."""
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    log_level = logging.DEBUG if verbose else logging.ERROR if quiet else logging.INFO
    root_logger.setLevel(log_level)

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        ensure_directory(os.path.dirname(log_file))
        file_handler = logging.FileHandler(log_file, mode='w')
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
        logger.info(f"Logging configured - console and file: {log_file}")


def analysis_options(func):
    """Options shared by the analysis commands."""
    options = [
        click.option('--config', type=click.Path(exists=True), help='Path to YAML config file'),
        click.option('--genes', type=click.Path(exists=True),
                     help='Gene identifier list (overrides config)'),
        click.option('--data-dir', type=click.Path(exists=True),
                     help='Local data directory (overrides config)'),
        click.option('--outdir', type=click.Path(), help='Output directory (overrides config)'),
        click.option('--frame-policy', type=click.Choice(['warn', 'skip']),
                     help='Handling of sequence/structure length mismatches'),
        click.option('--figure-format', type=click.Choice(['svg', 'pdf', 'png']),
                     help='Output format for figures'),
        click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging'),
        click.option('--quiet', '-q', is_flag=True, help='Enable quiet mode (errors only)'),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _run_analysis(command_name: str, analysis, **kwargs) -> None:
    """Common setup, error handling and reporting for analysis commands."""
    verbose = kwargs['verbose']
    try:
        config_data = _prepare_config(kwargs['config'], kwargs['genes'], kwargs['data_dir'],
                                      kwargs['outdir'], kwargs['frame_policy'],
                                      kwargs['figure_format'])
        output_dir = config_data['output_dir']
        _setup_logging(os.path.join(output_dir, 'codon_structure.log'), verbose, kwargs['quiet'])
        configure_warnings(verbose=verbose)

        logger.info(f"Starting {command_name} analysis")
        engine = build_engine(config_data, logging.getLogger(f'codon_structure.{command_name}'))
        analysis(engine, config_data)
        logger.info(f"{command_name} analysis completed")

    except (CodonStructureError, FileNotFoundError) as e:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
        logger.error(f"Analysis failed: {e}")
        sys.exit(1)
    except Exception as e:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
        logger.error(f"Analysis failed: {e}")
        if verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


def report_evaluation(evaluation: Evaluation, name: str, config: Dict[str, Any]) -> None:
    """Print an evaluation summary and save its table and figure."""
    output_dir = config['output_dir']
    summary = evaluation.summary()

    click.echo(f"Processed {evaluation.processed_count}/{evaluation.requested_count} genes")
    click.echo(f"{evaluation.positive_label}: mean {evaluation.mean_positive_mean:.4f}, "
               f"mean sd {evaluation.mean_positive_sd:.4f}")
    click.echo(f"{evaluation.negative_label}: mean {evaluation.mean_negative_mean:.4f}, "
               f"mean sd {evaluation.mean_negative_sd:.4f}")
    if not math.isnan(summary['wilcoxon_p_value']):
        click.echo(f"Wilcoxon signed-rank p = {summary['wilcoxon_p_value']:.4g}")
    for gene_id, reason in evaluation.skipped.items():
        logger.debug(f"Skipped {gene_id}: {reason}")

    save_dataframe(evaluation.to_dataframe(), os.path.join(output_dir, f'{name}_per_gene.tsv'))
    save_dataframe(pd.DataFrame([summary]), os.path.join(output_dir, f'{name}_summary.tsv'))

    figure_format = config.get('figure_format', 'svg')
    try:
        create_evaluation_boxplot(evaluation, os.path.join(output_dir, f'{name}.{figure_format}'),
                                  format=figure_format)
    except Exception as e:
        logger.error(f"Error creating boxplot: {e}")


def report_correlation(result: CorrelationResult, config: Dict[str, Any]) -> None:
    """Print a correlation summary and save its table and figure."""
    output_dir = config['output_dir']
    r, p_value = result.pearson()

    click.echo(f"Processed {result.processed_count}/{result.requested_count} genes")
    if math.isnan(r):
        click.echo("Pearson r: not enough data")
    else:
        click.echo(f"Pearson r = {r:.4f} (p = {p_value:.4g})")

    name = f'correlation_{result.feature_name}'
    save_dataframe(result.to_dataframe(), os.path.join(output_dir, f'{name}.tsv'))

    figure_format = config.get('figure_format', 'svg')
    try:
        create_correlation_scatter(result, os.path.join(output_dir, f'{name}.{figure_format}'),
                                   format=figure_format)
    except Exception as e:
        logger.error(f"Error creating scatter plot: {e}")


@click.command()
@click.option('--radius', type=click.IntRange(0, None), default=None,
              help='Max residues from a domain boundary, counting both ends (overrides config)')
@analysis_options
def boundaries(radius: Optional[int], **kwargs) -> None:
    """Compare codon weights near domain boundaries with the rest."""
    def analysis(engine: CorrelationEngine, config: Dict[str, Any]) -> None:
        effective_radius = radius if radius is not None else int(config['analysis']['radius'])
        evaluation = engine.evaluate_near_domain_boundaries(effective_radius)
        report_evaluation(evaluation, f'boundaries_r{effective_radius}', config)

    _run_analysis('boundaries', analysis, **kwargs)


@click.command()
@analysis_options
def beta_sheets(**kwargs) -> None:
    """Compare codon weights inside beta sheets with the rest."""
    def analysis(engine: CorrelationEngine, config: Dict[str, Any]) -> None:
        evaluation = engine.evaluate_within_beta_sheets()
        report_evaluation(evaluation, 'beta_sheets', config)

    _run_analysis('beta_sheets', analysis, **kwargs)


@click.command()
@click.option('--feature', type=click.Choice(sorted(FEATURES)), required=True,
              help='Per-gene feature to correlate with total codon weight')
@analysis_options
def correlate(feature: str, **kwargs) -> None:
    """Correlate total codon weight with a per-gene feature."""
    def analysis(engine: CorrelationEngine, config: Dict[str, Any]) -> None:
        result = engine.correlate(FEATURES[feature], feature_name=feature)
        report_correlation(result, config)

    _run_analysis('correlate', analysis, **kwargs)


@click.command()
@click.option('--species', type=click.Choice(available_species()), default='E. coli',
              help='Bundled frequency table')
@click.option('--table', type=click.Path(exists=True), help='Custom frequency table')
def show_weights(species: str, table: Optional[str]) -> None:
    """Show the normalized codon weights of a frequency table."""
    try:
        weights = CodonWeightTable.from_file(table) if table else CodonWeightTable.for_species(species)
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"Codon weights ({table or species})")
    click.echo("=" * 40)
    for group, codons in weights.groups.items():
        cells = '  '.join(f"{codon} {weight:.3f}" for codon, weight in codons.items())
        click.echo(f"{group:<5} {cells}")


@click.command()
@click.option('--output', '-o',
              type=click.Path(),
              default='config/codon_structure.yaml',
              help='Output path for example configuration')
def create_config(output: str) -> None:
    """Create an example configuration file."""
    create_example_config(output)
    click.echo(f"Example configuration written to {output}")


@click.command()
@click.argument('config_path', type=click.Path(exists=True))
def validate_config_cmd(config_path: str) -> None:
    """Validate a configuration file."""
    try:
        config = expand_paths(load_config(config_path),
                              os.path.dirname(os.path.abspath(config_path)))
    except ConfigError as e:
        click.echo(f"Configuration validation failed: {e}", err=True)
        sys.exit(1)

    click.echo("Configuration is valid")
    missing_paths = validate_file_paths(config)
    if missing_paths:
        click.echo(f"Missing file paths: {', '.join(missing_paths)}")
    else:
        click.echo("All file paths exist")


@click.group()
def cli():
    """Codon usage bias vs protein structure."""
    pass


cli.add_command(boundaries, name='boundaries')
cli.add_command(beta_sheets, name='beta-sheets')
cli.add_command(correlate, name='correlate')
cli.add_command(show_weights, name='show-weights')
cli.add_command(create_config, name='create-config')
cli.add_command(validate_config_cmd, name='validate-config')


if __name__ == '__main__':
    cli()
