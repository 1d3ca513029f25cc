"""
Piecewise minimax rational fits of the complete elliptic integrals.

The tables follow Fukushima (2015), "Precise and fast computation of complete
elliptic integrals by piecewise minimax rational function approximation",
J. Comput. Appl. Math. 282, 71-76, doi:10.1016/j.cam.2014.12.038.

Every fit is expressed in the complementary parameter mc = 1 - m.
Segments are ordered by decreasing ``mc_lower_bound``; a segment applies when
mc is strictly larger than its bound. Below the last bound the logarithmic
branch takes over.

The literals are tuning constants of the fit. Do not round or recompute them.
"""
from typing import NamedTuple, Tuple

import numpy as np


class Segment(NamedTuple):
    """
    One fitted interval of mc.

    t = scale * mc - shift maps the interval onto roughly [-1, 1].
    numerator   : 6 coefficients of P(t), constant term first.
    denominator : 5 coefficients of the monic Q(t), constant term first
                  (the leading t**5 coefficient is 1).
    """
    mc_lower_bound: float
    scale: float
    shift: float
    numerator: Tuple[float, ...]
    denominator: Tuple[float, ...]


class LogBranch(NamedTuple):
    """
    Closed form near mc = 0 in u = 1 - scale * mc.

    All four quadratics store 3 coefficients, constant term first, with the
    leading coefficient written out.
    """
    scale: float
    log_scale: float
    lead_numerator: Tuple[float, ...]
    lead_denominator: Tuple[float, ...]
    corr_numerator: Tuple[float, ...]
    corr_denominator: Tuple[float, ...]


K_SEGMENTS = (
    Segment(0.592990, 2.45694208987494165, 1.45694208987494165,
            (3703.75266375099019, 5462.47093231923466, 2744.82029097576810,
             543.839017382099411, 36.2381612593459565, 0.393188651542789784),
            (2077.94377067058435, 3398.00069767755460, 1959.05960044399275,
             472.794455487539279, 43.5464368440078942)),
    Segment(0.350756, 4.12823963605439369, 1.44800482178389491,
            (4264.28203103974630, 6341.90978213264024, 3214.59187442783167,
             642.790566685354573, 43.2589626155454993, 0.475223892294445943),
            (2125.06914237062279, 3479.95663350926514, 2006.03187933518870,
             482.900172581418890, 44.1848041560412224)),
    Segment(0.206924, 6.95255575949719117, 1.43865064797819679,
            (4870.25402224986382, 7307.18826377416591, 3738.29369283392307,
             754.928587580583704, 51.3609902253065926, 0.571948962277566451),
            (2172.51745704102287, 3565.04737778032566, 2056.13612019430497,
             493.962405117599400, 44.9026847057686146)),
    Segment(0.121734, 11.7384669562155183, 1.42897053644793990,
            (5514.8512729127464, 8350.4595896779631, 4313.60788246750934,
             880.27903031894216, 60.598720224393536, 0.68504458747933773),
            (2218.41682813309737, 3650.41829123846319, 2107.97379949034285,
             505.74295207655096, 45.6911096775045314)),
    Segment(0.071412, 19.8720241643813839, 1.41910098962680339,
            (6188.8743957372448, 9459.3331440432847, 4935.41351498551527,
             1018.21910476032105, 70.981049144472361, 0.81599895108245948),
            (2260.73112539748448, 3732.66955095581621, 2159.68721749761492,
             517.86964191812384, 46.5298955058476510)),
    Segment(0.041770, 33.7359152553808785, 1.40914918021725929,
            (6879.5170681289562, 10615.0836403687221, 5594.8381504799829,
             1167.26108955935542, 82.452856129147838, 0.96592719058503951),
            (2296.88303450660439, 3807.37745652028212, 2208.74949754945558,
             529.79651353072921, 47.3844470709989137)),
    Segment(0.024360, 57.4382538770821367, 1.39919586444572085,
            (7570.6827538712100, 11792.9392624454532, 6279.2661370014890,
             1325.01058966228180, 94.886883830605940, 1.13537029594409690),
            (2324.04824540459984, 3869.56755306385732, 2252.22250562615338,
             540.85752251676412, 48.2089280211559345)),
    Segment(0.014165, 98.0872976949485042, 1.38940657184894556,
            (8247.2601660137746, 12967.7060124572914, 6974.7495213178613,
             1488.54008220335966, 108.098282908839979, 1.32411616748380686),
            (2340.47337508405427, 3915.63324533769906, 2287.70677154700516,
             550.45072377717361, 48.9575432570382154)),
    Segment(0.008213, 168.010752688172043, 1.37987231182795699,
            (8894.2961573611293, 14113.7038749808951, 7666.5611739483371,
             1654.60731579994159, 121.863474964652041, 1.53112170837206117),
            (2344.88618943372377, 3942.81065054556536, 2313.28396270968662,
             558.07615380622169, 49.5906602613891184)),
)

# K ~ -log(mc/16) * A(u) - mc * B(u)
K_LOG_BRANCH = LogBranch(
    scale=121.758188238159016,
    log_scale=0.0625,
    lead_numerator=(34813.4518336350547, 235.767716637974271, 0.199792723884069485),
    lead_denominator=(69483.5736412906324, 614.265044703187382, 1.0),
    corr_numerator=(9382.53386835986099, 51.6478985993381223, 0.00410754154682816898),
    corr_denominator=(37327.7262507318317, 408.017247271148538, 1.0),
)

E_SEGMENTS = (
    Segment(0.566638, 2.30753965506897236, 1.30753965506897236,
            (19702.2363352671642, 31904.1559574281609, 18177.1879313824040,
             4362.94760768571862, 409.975559128654710, 10.3244775335024885),
            (14241.2135819448616, 20909.9899599927367, 10266.4884503526076,
             1934.86289070792954, 117.162100771599098)),
    Segment(0.315153, 3.97638030101198879, 1.25316818100483130,
            (16317.0721393008221, 26627.8852140835023, 15129.4009798463159,
             3574.15857605556033, 326.113727011739428, 7.93163724081373477),
            (13047.1505096551210, 19753.5762165922376, 9964.25173735060361,
             1918.72232033637537, 117.670514069579649)),
    Segment(0.171355, 6.95419964116329852, 1.19163687951153702,
            (13577.3850240991520, 22545.4744699553993, 12871.9137872656293,
             3000.74575264868572, 263.964361648520708, 6.08522443139677663),
            (11717.3306408059832, 18431.1264424290258, 9619.40382323874064,
             1904.06010727307491, 118.690522739531267)),
    Segment(0.090670, 12.3938774245522712, 1.12375286608415443,
            (11307.9485341543712, 19328.6173704569489, 11208.6068472959372,
             2596.54874477084334, 219.253495956962613, 4.66931143174036616),
            (10307.6837501971393, 16982.2450249024383, 9241.7604666150102,
             1893.41905403040679, 120.498555754227847)),
    Segment(0.046453, 22.6157360291290680, 1.05056878576113260,
            (9383.1490856819874, 16718.9730458676860, 9977.2498973537718,
             2323.49987246555537, 188.618148076418837, 3.59313532204509922),
            (8877.1964704758383, 15450.0537230364062, 8840.2771293410661,
             1889.13672102820913, 123.422125687316355)),
    Segment(0.022912, 42.4790790535661187, 0.973280659275306911,
            (7719.1171817802054, 14521.7363804934985, 9045.3996063894006,
             2149.92068078627829, 169.386557799782496, 2.78515570453129137),
            (7479.7539074698012, 13874.4978011497847, 8420.3848818926324,
             1892.69753150329759, 127.802109608726363)),
    Segment(0.010809, 82.6241427745187144, 0.893084359249772784,
            (6261.6095608987273, 12593.0874916293982, 8304.3265605809870,
             2048.68391263416822, 159.371262600702237, 2.18867046462858104),
            (6156.4532048239501, 12283.8373999680518, 7979.7435857665227,
             1903.60556312663537, 133.911640385965187)),
    Segment(0.004841, 167.560321715817694, 0.811159517426273458,
            (4978.06146583586728, 10831.7178150656694, 7664.6703673290453,
             1995.66437151562090, 156.689647694892782, 1.75859085945198570),
            (4935.56743322938333, 10694.5510113880077, 7506.8028283118051,
             1918.38517009740321, 141.854303920116856)),
)

# E ~ -mc * log(mc/16) * A(u) + B(u)
E_LOG_BRANCH = LogBranch(
    scale=206.568890725056806,
    log_scale=0.0625,
    lead_numerator=(41566.6612602868736, 154.034981522913482, 0.0618072471798575991),
    lead_denominator=(165964.442527585615, 917.589668642251803, 1.0),
    corr_numerator=(132232.803956682877, 353.375480007017643, -1.40105837312528026),
    corr_denominator=(132393.665743088043, 192.112635228732532, -1.0),
)


def stack_segments(segments):
    """
    Stack a segment table into float64 arrays for vectorized lookup.

    Returns (bounds, scale, shift, numerator, denominator) with shapes
    (n,), (n,), (n,), (n, 6), (n, 5).
    """
    bounds = np.array([s.mc_lower_bound for s in segments], dtype=np.float64)
    scale = np.array([s.scale for s in segments], dtype=np.float64)
    shift = np.array([s.shift for s in segments], dtype=np.float64)
    numerator = np.array([s.numerator for s in segments], dtype=np.float64)
    denominator = np.array([s.denominator for s in segments], dtype=np.float64)
    return bounds, scale, shift, numerator, denominator


K_BOUNDS, K_SCALE, K_SHIFT, K_NUMERATOR, K_DENOMINATOR = stack_segments(K_SEGMENTS)
E_BOUNDS, E_SCALE, E_SHIFT, E_NUMERATOR, E_DENOMINATOR = stack_segments(E_SEGMENTS)

for _arr in (K_BOUNDS, K_SCALE, K_SHIFT, K_NUMERATOR, K_DENOMINATOR,
             E_BOUNDS, E_SCALE, E_SHIFT, E_NUMERATOR, E_DENOMINATOR):
    _arr.setflags(write=False)
del _arr
