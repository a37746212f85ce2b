"""
Visualization functions for sequestration schedules.
"""
import matplotlib.pyplot as plt
import seaborn as sns

# Set default style
try:
    plt.style.use('seaborn-v0_8')
except OSError:
    plt.style.use('default')

sns.set_palette("husl")


def plot_sequestration(bundle, save_path=None):
    """Plot cumulative and incremental CO2e, biomass pools and green cover.

    Args:
        bundle: ResultBundle of a sequestration run
        save_path: Optional path to save the plot
    """
    df = bundle.to_dataframe()
    ages = df['age']

    fig, ((ax1, ax2), (ax3, ax4)) = plt.subplots(2, 2, figsize=(12, 10))
    species = getattr(bundle.inputs.species, 'value', bundle.inputs.species)
    fig.suptitle(f'Sequestration Schedule ({species}, {bundle.inputs.project_area:g} ha)',
                 fontsize=14)

    # Cumulative CO2e
    ax1.plot(ages, df['cumulative_co2e'], 'g-', marker='o', label='Cumulative CO2e')
    ax1.set_xlabel('Project Year')
    ax1.set_ylabel('Cumulative CO2e (tCO2e)')
    ax1.grid(True)

    # Annual increment
    ax2.bar(ages, df['incremental_co2e'], color='tab:blue', label='Incremental CO2e')
    ax2.set_xlabel('Project Year')
    ax2.set_ylabel('Incremental CO2e (tCO2e/yr)')
    ax2.grid(True)

    # Biomass pools
    ax3.plot(ages, df['above_ground_biomass_per_ha'], 'b-', label='Aboveground')
    ax3.plot(ages, df['below_ground_biomass_per_ha'], 'r--', label='Belowground')
    ax3.plot(ages, df['total_biomass_per_ha'], 'k-', label='Total')
    ax3.set_xlabel('Project Year')
    ax3.set_ylabel('Biomass (t d.m./ha)')
    ax3.legend()
    ax3.grid(True)

    # Green cover
    ax4.plot(ages, df['green_cover_percentage'], 'g--', label='Green Cover')
    ax4.set_xlabel('Project Year')
    ax4.set_ylabel('Green Cover (%)')
    ax4.set_ylim(0, 100)
    ax4.grid(True)

    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches='tight')
    else:
        plt.show()

    plt.close()


def plot_species_comparison(mix_result, save_path=None):
    """Plot cumulative CO2e per species of a mixed planting.

    Args:
        mix_result: SpeciesMixResult
        save_path: Optional path to save the plot
    """
    df = mix_result.to_dataframe()

    plt.figure(figsize=(10, 6))
    sns.lineplot(data=df, x='age', y='cumulative_co2e', hue='species', marker='o')
    plt.xlabel('Project Year')
    plt.ylabel('Cumulative CO2e (tCO2e)')
    plt.title('Cumulative Sequestration by Species')
    plt.grid(True)

    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches='tight')
    else:
        plt.show()

    plt.close()
