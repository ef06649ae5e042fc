"""CLI 진입점 — Typer 서브커맨드."""

from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn

from .config import SimulationConfig
from .simulation import SimulationResult, run_simulation
from ..io.viewer import PARAVIEW_DOWNLOAD_URL, open_in_paraview
from ..io.vtk_export import VTKExportError
from ..peridynamics.validation import InvalidParameterError

app = typer.Typer(
    name="pdporosity",
    help="Peridynamic 다공성 pre-damage 시뮬레이터 (2D 격자 → 본드 파괴 → VTK)",
    no_args_is_help=True,
)

console = Console()

_PROMPTS = {
    "lx": "Enter domain length in x (Lx)",
    "ly": "Enter domain length in y (Ly)",
    "dx": "Enter discretization size (dx)",
    "phi": "Enter porosity ratio phi (0..1)",
    "m": "Enter horizon factor m (delta = m*dx)",
}


def _make_progress_callback(progress: Progress, task_id):
    """Rich Progress 콜백 생성."""
    def callback(stage: str, details: dict):
        msg = details.get("message", "")
        progress.update(task_id, description=f"[cyan]{stage}[/] {msg}")
    return callback


def _prompt_parameters(**given) -> dict:
    """누락된 파라미터만 프롬프트로 입력받음."""
    values = {}
    for name, label in _PROMPTS.items():
        value = given.get(name)
        values[name] = value if value is not None else typer.prompt(label, type=float)
    return values


def _execute(config: SimulationConfig) -> Optional[SimulationResult]:
    """시뮬레이션 실행 + 결과 출력. 실패 시 None."""
    try:
        with Progress(SpinnerColumn(), TextColumn("{task.description}"), console=console) as progress:
            task = progress.add_task("[cyan]simulation[/] 시작...", total=None)
            result = run_simulation(config, progress_callback=_make_progress_callback(progress, task))
    except InvalidParameterError as e:
        console.print(f"[red]잘못된 입력[/]: {escape(str(e))}")
        return None
    except VTKExportError as e:
        console.print(f"[red]저장 실패[/]: {escape(str(e))}")
        return None
    except ImportError as e:
        console.print(f"[red]taichi 미설치[/]: {escape(str(e))} (pip install 'pdporosity\\[taichi]')")
        return None
    except RuntimeError as e:
        console.print(f"[red]실행 실패[/]: {escape(str(e))}")
        return None

    _print_summary(result)
    return result


def _print_summary(result: SimulationResult):
    lattice = result.lattice
    pre = result.pre_damage
    stats = result.statistics
    console.print(
        f"격자: Nx = {lattice.nx}, Ny = {lattice.ny}, total particles N = {lattice.n_particles}"
    )
    console.print(f"Total bonds (before damage): {pre.total_bond_count}")
    console.print(f"Broken bonds (after damage): {pre.broken_bond_count}")
    console.print(f"Realized global porosity (bond-based) ~ {pre.realized_porosity:.4f}")
    console.print(
        f"Damage: min={stats.minimum:.3f}, max={stats.maximum:.3f}, mean={stats.mean:.3f}"
    )
    if result.output_path is not None:
        console.print(f"[green]완료[/]: {result.output_path} ({result.elapsed_time:.1f}초)")


@app.command()
def run(
    lx: Optional[float] = typer.Option(None, "--lx", help="x 방향 도메인 길이 (Lx)"),
    ly: Optional[float] = typer.Option(None, "--ly", help="y 방향 도메인 길이 (Ly)"),
    dx: Optional[float] = typer.Option(None, "--dx", help="격자 간격"),
    phi: Optional[float] = typer.Option(None, "--phi", help="목표 기공률 (0..1)"),
    m: Optional[float] = typer.Option(None, "-m", "--horizon-factor", help="horizon 계수 (delta = m*dx)"),
    config_path: Optional[Path] = typer.Option(None, "-c", "--config", help="설정 파일 경로 (TOML)"),
    seed: Optional[int] = typer.Option(None, "--seed", help="난수 시드 (재현용)"),
    method: Optional[str] = typer.Option(None, "--method", help="본드 탐색 방법 (brute/grid/taichi)"),
    output_dir: Optional[Path] = typer.Option(None, "-o", "--output", help="출력 디렉토리"),
    backend: Optional[str] = typer.Option(None, "--backend", help="taichi 백엔드 (cpu/cuda/vulkan/auto, --method taichi 전용)"),
    open_viewer: Optional[bool] = typer.Option(None, "--open/--no-open", help="저장 후 ParaView로 열기 (설정 파일 값 덮어쓰기)"),
):
    """시뮬레이션 1회 실행.

    설정 파일이 없으면 누락된 파라미터를 프롬프트로 입력받는다.
    명령행 옵션은 설정 파일 값보다 우선한다.
    """
    try:
        if config_path is not None:
            data = SimulationConfig.from_toml(config_path).model_dump()
        else:
            params = _prompt_parameters(lx=lx, ly=ly, dx=dx, phi=phi, m=m)
            data = SimulationConfig.from_parameters(**params).model_dump()

        overrides = {
            ("lattice", "lx"): lx,
            ("lattice", "ly"): ly,
            ("lattice", "dx"): dx,
            ("damage", "phi"): phi,
            ("bonds", "horizon_factor"): m,
            ("damage", "seed"): seed,
            ("bonds", "method"): method,
            ("bonds", "backend"): backend,
            ("output", "output_dir"): str(output_dir) if output_dir is not None else None,
            ("output", "open_viewer"): open_viewer,
        }
        for (section, key), value in overrides.items():
            if value is not None:
                data[section][key] = value

        cfg = SimulationConfig(**data)
    except FileNotFoundError as e:
        console.print(f"[red]실패[/]: {escape(str(e))}")
        raise typer.Exit(1)
    except ValidationError as e:
        console.print(f"[red]잘못된 설정[/]: {escape(str(e))}")
        raise typer.Exit(1)

    if _execute(cfg) is None:
        raise typer.Exit(1)


@app.command()
def interactive(
    output_dir: Path = typer.Option(".", "-o", "--output", help="출력 디렉토리"),
    method: str = typer.Option("grid", "--method", help="본드 탐색 방법 (brute/grid/taichi)"),
):
    """대화형 모드: 파라미터 입력 → 실행 → (선택) 시각화, 반복."""
    console.print("\n[bold]===== Peridynamic Porosity Simulation =====[/]")

    while True:
        params = _prompt_parameters()
        try:
            cfg = SimulationConfig.from_parameters(**params, method=method, output_dir=output_dir)
        except ValidationError as e:
            console.print(f"[red]잘못된 설정[/]: {escape(str(e))}")
            raise typer.Exit(1)

        result = _execute(cfg)
        if result is not None and result.output_path is not None:
            if typer.confirm("Would you like to visualize the results?", default=False):
                if not open_in_paraview(result.output_path):
                    console.print(
                        f"[yellow]ParaView를 열 수 없습니다[/]. 직접 여세요: {result.output_path}\n"
                        f"ParaView (free): {PARAVIEW_DOWNLOAD_URL}"
                    )

        if not typer.confirm("Would you like to run another simulation?", default=False):
            break

    console.print("\nThank you for using the Peridynamic Porosity Simulator!")


@app.command()
def view(
    input_path: Path = typer.Argument(..., help="열 VTK 파일 경로"),
):
    """기존 VTK 파일을 ParaView로 열기."""
    if not input_path.exists():
        console.print(f"[red]실패[/]: 파일을 찾을 수 없습니다: {input_path}")
        raise typer.Exit(1)

    if not open_in_paraview(input_path):
        console.print(
            f"[yellow]ParaView를 열 수 없습니다[/]. 직접 여세요: {input_path.resolve()}\n"
            f"ParaView (free): {PARAVIEW_DOWNLOAD_URL}"
        )
        raise typer.Exit(1)

    console.print(f"[green]완료[/]: ParaView 실행 → {input_path}")


if __name__ == "__main__":
    app()
