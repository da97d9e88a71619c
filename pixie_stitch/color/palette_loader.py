from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Tuple

import numpy as np

from ..core.errors import ConfigurationError
from ..core.types import PixelColor

# DMC stranded cotton: (code, sRGB)
_DMC_TABLE = [
    ("3713", (255, 226, 226)),
    ("761", (255, 201, 201)),
    ("760", (245, 173, 173)),
    ("3712", (241, 135, 135)),
    ("3328", (227, 109, 109)),
    ("347", (191, 45, 45)),
    ("353", (254, 215, 204)),
    ("352", (253, 156, 151)),
    ("351", (233, 106, 103)),
    ("350", (224, 72, 72)),
    ("349", (210, 16, 53)),
    ("817", (187, 5, 31)),
    ("3708", (255, 203, 213)),
    ("3706", (255, 173, 188)),
    ("3705", (255, 121, 146)),
    ("3801", (231, 73, 103)),
    ("666", (227, 29, 66)),
    ("321", (199, 43, 59)),
    ("304", (183, 31, 51)),
    ("498", (167, 19, 43)),
    ("816", (151, 11, 35)),
    ("815", (135, 7, 31)),
    ("814", (123, 0, 27)),
    ("894", (255, 178, 187)),
    ("893", (252, 144, 162)),
    ("892", (255, 121, 140)),
    ("891", (255, 87, 115)),
    ("818", (255, 223, 217)),
    ("957", (253, 181, 181)),
    ("956", (255, 145, 145)),
    ("309", (86, 74, 74)),
    ("963", (255, 215, 215)),
    ("3716", (255, 189, 189)),
    ("962", (230, 138, 138)),
    ("961", (207, 115, 115)),
    ("3833", (234, 134, 153)),
    ("3832", (219, 85, 110)),
    ("3831", (179, 47, 72)),
    ("777", (145, 53, 70)),
    ("819", (255, 238, 235)),
    ("3326", (251, 173, 180)),
    ("776", (252, 176, 185)),
    ("899", (242, 118, 136)),
    ("335", (238, 84, 110)),
    ("326", (179, 59, 75)),
    ("151", (240, 206, 212)),
    ("3354", (228, 166, 172)),
    ("3733", (232, 135, 155)),
    ("3731", (218, 103, 131)),
    ("3350", (188, 67, 101)),
    ("150", (171, 2, 73)),
    ("3689", (251, 191, 194)),
    ("3688", (231, 169, 172)),
    ("3687", (201, 107, 112)),
    ("3803", (171, 51, 87)),
    ("3685", (136, 21, 49)),
    ("605", (255, 192, 205)),
    ("604", (255, 176, 190)),
    ("603", (255, 164, 190)),
    ("602", (226, 72, 116)),
    ("601", (209, 40, 106)),
    ("600", (205, 47, 99)),
    ("3806", (255, 140, 174)),
    ("3805", (243, 71, 139)),
    ("3804", (224, 40, 118)),
    ("3609", (244, 174, 213)),
    ("3608", (234, 156, 196)),
    ("3607", (197, 73, 137)),
    ("718", (156, 36, 98)),
    ("917", (155, 19, 89)),
    ("915", (130, 0, 67)),
    ("225", (255, 223, 213)),
    ("224", (235, 183, 175)),
    ("152", (226, 160, 153)),
    ("223", (204, 132, 124)),
    ("3722", (188, 108, 100)),
    ("3721", (161, 75, 81)),
    ("221", (136, 62, 67)),
    ("778", (223, 179, 187)),
    ("3727", (219, 169, 178)),
    ("316", (183, 115, 127)),
    ("3726", (155, 91, 102)),
    ("315", (129, 73, 82)),
    ("3802", (113, 65, 73)),
    ("902", (130, 38, 55)),
    ("3743", (215, 203, 211)),
    ("3042", (183, 157, 167)),
    ("3041", (149, 111, 124)),
    ("3740", (120, 87, 98)),
    ("3836", (186, 145, 170)),
    ("3835", (148, 96, 131)),
    ("3834", (114, 55, 93)),
    ("154", (87, 36, 51)),
    ("211", (227, 203, 227)),
    ("210", (195, 159, 195)),
    ("209", (163, 123, 167)),
    ("208", (131, 91, 139)),
    ("3837", (108, 58, 110)),
    ("327", (99, 54, 102)),
    ("153", (230, 204, 217)),
    ("554", (219, 179, 203)),
    ("553", (163, 99, 139)),
    ("552", (128, 58, 107)),
    ("550", (92, 24, 78)),
    ("3747", (211, 215, 237)),
    ("341", (183, 191, 221)),
    ("156", (163, 174, 209)),
    ("340", (173, 167, 199)),
    ("155", (152, 145, 182)),
    ("3746", (119, 107, 152)),
    ("333", (92, 84, 120)),
    ("157", (187, 195, 217)),
    ("794", (143, 156, 193)),
    ("793", (112, 125, 162)),
    ("3807", (96, 103, 140)),
    ("792", (85, 91, 123)),
    ("158", (76, 82, 110)),
    ("791", (70, 69, 99)),
    ("3840", (176, 192, 218)),
    ("3839", (123, 142, 171)),
    ("3838", (92, 114, 148)),
    ("800", (192, 204, 222)),
    ("809", (148, 168, 198)),
    ("799", (116, 142, 182)),
    ("798", (70, 106, 142)),
    ("797", (19, 71, 125)),
    ("796", (17, 65, 109)),
    ("820", (14, 54, 92)),
    ("162", (219, 236, 245)),
    ("827", (189, 221, 237)),
    ("813", (161, 194, 215)),
    ("826", (107, 158, 191)),
    ("825", (71, 129, 165)),
    ("824", (57, 105, 135)),
    ("996", (48, 194, 236)),
    ("3843", (20, 170, 208)),
    ("995", (38, 150, 182)),
    ("3846", (6, 227, 230)),
    ("3845", (4, 196, 202)),
    ("3844", (18, 174, 186)),
    ("159", (199, 202, 215)),
    ("160", (153, 159, 183)),
    ("161", (120, 128, 164)),
    ("3756", (238, 252, 252)),
    ("775", (217, 235, 241)),
    ("3841", (205, 223, 237)),
    ("3325", (184, 210, 230)),
    ("3755", (147, 180, 206)),
    ("334", (115, 159, 193)),
    ("322", (90, 143, 184)),
    ("312", (53, 102, 139)),
    ("803", (44, 89, 124)),
    ("336", (37, 59, 115)),
    ("823", (33, 48, 99)),
    ("939", (27, 40, 83)),
    ("3753", (219, 226, 233)),
    ("3752", (199, 209, 219)),
    ("932", (162, 181, 198)),
    ("931", (106, 133, 158)),
    ("930", (69, 92, 113)),
    ("3750", (56, 76, 94)),
    ("828", (197, 232, 237)),
    ("3761", (172, 216, 226)),
    ("519", (126, 177, 200)),
    ("518", (79, 147, 167)),
    ("3760", (62, 133, 162)),
    ("517", (59, 118, 143)),
    ("3842", (50, 102, 124)),
    ("311", (28, 80, 102)),
    ("747", (229, 252, 253)),
    ("3766", (153, 207, 217)),
    ("807", (100, 171, 186)),
    ("806", (61, 149, 165)),
    ("3765", (52, 127, 140)),
    ("3811", (188, 227, 230)),
    ("598", (144, 195, 204)),
    ("597", (91, 163, 179)),
    ("3810", (72, 142, 154)),
    ("3809", (63, 124, 133)),
    ("3808", (54, 105, 112)),
    ("928", (221, 227, 227)),
    ("927", (189, 203, 203)),
    ("926", (152, 174, 174)),
    ("3768", (101, 127, 127)),
    ("924", (86, 106, 106)),
    ("3849", (82, 179, 164)),
    ("3848", (85, 147, 146)),
    ("3847", (52, 125, 117)),
    ("964", (169, 226, 216)),
    ("959", (89, 199, 180)),
    ("958", (62, 182, 161)),
    ("3812", (47, 140, 132)),
    ("3851", (73, 179, 161)),
    ("943", (61, 147, 132)),
    ("3850", (55, 132, 119)),
    ("993", (144, 192, 180)),
    ("992", (111, 174, 159)),
    ("3814", (80, 139, 125)),
    ("991", (71, 123, 110)),
    ("966", (185, 215, 192)),
    ("564", (167, 205, 175)),
    ("563", (143, 192, 152)),
    ("562", (83, 151, 106)),
    ("505", (51, 131, 98)),
    ("3817", (153, 195, 170)),
    ("3816", (101, 165, 125)),
    ("163", (77, 131, 97)),
    ("3815", (71, 119, 89)),
    ("561", (44, 106, 69)),
    ("504", (196, 222, 204)),
    ("3813", (178, 212, 189)),
    ("503", (123, 172, 148)),
    ("502", (91, 144, 113)),
    ("501", (57, 111, 82)),
    ("500", (4, 77, 51)),
    ("955", (162, 214, 173)),
    ("954", (136, 186, 145)),
    ("913", (109, 171, 119)),
    ("912", (27, 157, 107)),
    ("911", (24, 144, 101)),
    ("910", (24, 126, 86)),
    ("909", (21, 111, 73)),
    ("3818", (17, 90, 59)),
    ("369", (215, 237, 204)),
    ("368", (166, 194, 152)),
    ("320", (105, 136, 90)),
    ("367", (97, 122, 82)),
    ("319", (32, 95, 46)),
    ("890", (23, 73, 35)),
    ("164", (200, 216, 184)),
    ("989", (141, 166, 117)),
    ("988", (115, 139, 91)),
    ("987", (88, 113, 65)),
    ("986", (64, 82, 48)),
    ("772", (228, 236, 212)),
    ("3348", (204, 217, 177)),
    ("3347", (113, 147, 92)),
    ("3346", (64, 106, 58)),
    ("3345", (27, 89, 21)),
    ("895", (27, 83, 0)),
    ("704", (158, 207, 52)),
    ("703", (123, 181, 71)),
    ("702", (71, 167, 47)),
    ("701", (63, 143, 41)),
    ("700", (7, 115, 27)),
    ("699", (5, 101, 23)),
    ("907", (199, 230, 102)),
    ("906", (127, 179, 53)),
    ("905", (98, 138, 40)),
    ("904", (85, 120, 34)),
    ("472", (216, 228, 152)),
    ("471", (174, 191, 121)),
    ("470", (148, 171, 79)),
    ("469", (114, 132, 60)),
    ("937", (98, 113, 51)),
    ("936", (76, 88, 38)),
    ("935", (66, 77, 33)),
    ("934", (49, 57, 25)),
    ("523", (171, 177, 151)),
    ("3053", (156, 164, 130)),
    ("3052", (136, 146, 104)),
    ("3051", (95, 102, 72)),
    ("524", (196, 205, 172)),
    ("522", (150, 158, 126)),
    ("520", (102, 109, 79)),
    ("3364", (131, 151, 95)),
    ("3363", (114, 130, 86)),
    ("3362", (94, 107, 71)),
    ("165", (239, 244, 164)),
    ("3819", (224, 232, 104)),
    ("166", (192, 200, 64)),
    ("581", (167, 174, 56)),
    ("580", (136, 141, 51)),
    ("734", (199, 192, 119)),
    ("733", (188, 179, 76)),
    ("732", (148, 140, 54)),
    ("731", (147, 139, 55)),
    ("730", (130, 123, 48)),
    ("3013", (185, 185, 130)),
    ("3012", (166, 167, 93)),
    ("3011", (137, 138, 88)),
    ("372", (204, 183, 132)),
    ("371", (191, 166, 113)),
    ("370", (184, 157, 100)),
    ("834", (219, 190, 127)),
    ("833", (200, 171, 108)),
    ("832", (189, 155, 81)),
    ("831", (170, 143, 86)),
    ("830", (141, 120, 75)),
    ("829", (126, 107, 66)),
    ("613", (220, 196, 170)),
    ("612", (188, 154, 120)),
    ("611", (150, 118, 86)),
    ("610", (121, 96, 71)),
    ("3047", (231, 214, 193)),
    ("3046", (216, 188, 154)),
    ("3045", (188, 150, 106)),
    ("167", (167, 124, 73)),
    ("746", (252, 252, 238)),
    ("677", (245, 236, 203)),
    ("422", (198, 159, 123)),
    ("3828", (183, 139, 97)),
    ("420", (160, 112, 66)),
    ("869", (131, 94, 57)),
    ("728", (228, 180, 104)),
    ("783", (206, 145, 36)),
    ("782", (174, 119, 32)),
    ("781", (162, 109, 32)),
    ("780", (148, 99, 26)),
    ("676", (229, 206, 151)),
    ("729", (208, 165, 62)),
    ("680", (188, 141, 14)),
    ("3829", (169, 130, 4)),
    ("3822", (246, 220, 152)),
    ("3821", (243, 206, 117)),
    ("3820", (223, 182, 95)),
    ("3852", (205, 157, 55)),
    ("445", (255, 251, 139)),
    ("307", (253, 237, 84)),
    ("973", (255, 227, 0)),
    ("444", (255, 214, 0)),
    ("3078", (253, 249, 205)),
    ("727", (255, 241, 175)),
    ("726", (253, 215, 85)),
    ("725", (255, 200, 64)),
    ("972", (255, 181, 21)),
    ("745", (255, 233, 173)),
    ("744", (255, 231, 147)),
    ("743", (254, 211, 118)),
    ("742", (255, 191, 87)),
    ("741", (255, 163, 43)),
    ("740", (255, 139, 0)),
    ("970", (247, 139, 19)),
    ("971", (246, 127, 0)),
    ("947", (255, 123, 77)),
    ("946", (235, 99, 7)),
    ("900", (209, 88, 7)),
    ("967", (255, 222, 213)),
    ("3824", (254, 205, 194)),
    ("3341", (252, 171, 152)),
    ("3340", (255, 131, 111)),
    ("608", (253, 93, 53)),
    ("606", (250, 50, 3)),
    ("951", (255, 226, 207)),
    ("3856", (255, 211, 181)),
    ("722", (247, 151, 111)),
    ("721", (242, 120, 66)),
    ("720", (229, 92, 31)),
    ("3825", (253, 189, 150)),
    ("922", (226, 115, 35)),
    ("921", (198, 98, 24)),
    ("920", (172, 84, 20)),
    ("919", (166, 69, 16)),
    ("918", (130, 52, 10)),
    ("3770", (255, 238, 227)),
    ("945", (251, 213, 187)),
    ("402", (247, 167, 119)),
    ("3776", (207, 121, 57)),
    ("301", (179, 95, 43)),
    ("400", (143, 67, 15)),
    ("300", (111, 47, 0)),
    ("3823", (255, 253, 227)),
    ("3855", (250, 211, 150)),
    ("3854", (242, 175, 104)),
    ("3853", (242, 151, 70)),
    ("3827", (247, 187, 119)),
    ("977", (220, 156, 86)),
    ("976", (194, 129, 66)),
    ("3826", (173, 114, 57)),
    ("975", (145, 79, 18)),
    ("948", (254, 231, 218)),
    ("754", (247, 203, 191)),
    ("3771", (244, 187, 169)),
    ("758", (238, 170, 155)),
    ("3778", (217, 137, 120)),
    ("356", (197, 106, 91)),
    ("3830", (185, 85, 68)),
    ("355", (152, 68, 54)),
    ("3777", (134, 48, 34)),
    ("3779", (248, 202, 200)),
    ("3859", (186, 139, 124)),
    ("3858", (150, 74, 63)),
    ("3857", (104, 37, 26)),
    ("3774", (243, 225, 215)),
    ("950", (238, 211, 196)),
    ("3064", (196, 142, 112)),
    ("407", (187, 129, 97)),
    ("3773", (182, 117, 82)),
    ("3772", (160, 108, 80)),
    ("632", (135, 85, 57)),
    ("453", (215, 206, 203)),
    ("452", (192, 179, 174)),
    ("451", (145, 123, 115)),
    ("3861", (166, 136, 129)),
    ("3860", (125, 93, 87)),
    ("779", (98, 75, 69)),
    ("712", (255, 251, 239)),
    ("739", (248, 228, 200)),
    ("738", (236, 204, 158)),
    ("437", (228, 187, 142)),
    ("436", (203, 144, 81)),
    ("435", (184, 119, 72)),
    ("434", (152, 94, 51)),
    ("433", (122, 69, 31)),
    ("801", (101, 57, 25)),
    ("898", (73, 42, 19)),
    ("938", (54, 31, 14)),
    ("3371", (30, 17, 8)),
    ("543", (242, 227, 206)),
    ("3864", (203, 182, 156)),
    ("3863", (164, 131, 92)),
    ("3862", (138, 110, 78)),
    ("3031", (75, 60, 42)),
    ("B5200", (255, 255, 255)),
    ("White", (252, 251, 248)),
    ("3865", (249, 247, 241)),
    ("Ecru", (240, 234, 218)),
    ("822", (231, 226, 211)),
    ("644", (221, 216, 203)),
    ("642", (164, 152, 120)),
    ("640", (133, 123, 97)),
    ("3787", (98, 93, 80)),
    ("3021", (79, 75, 65)),
    ("3024", (235, 234, 231)),
    ("3023", (177, 170, 151)),
    ("3022", (142, 144, 120)),
    ("535", (99, 100, 88)),
    ("3033", (227, 216, 204)),
    ("3782", (210, 188, 166)),
    ("3032", (179, 159, 139)),
    ("3790", (127, 106, 85)),
    ("3781", (107, 87, 67)),
    ("3866", (250, 246, 240)),
    ("842", (209, 186, 161)),
    ("841", (182, 155, 126)),
    ("840", (154, 124, 92)),
    ("839", (103, 85, 65)),
    ("838", (89, 73, 55)),
    ("3072", (230, 232, 232)),
    ("648", (188, 180, 172)),
    ("647", (176, 166, 156)),
    ("646", (135, 125, 115)),
    ("645", (110, 101, 92)),
    ("844", (72, 72, 72)),
    ("762", (236, 236, 236)),
    ("415", (211, 211, 214)),
    ("318", (171, 171, 171)),
    ("414", (140, 140, 140)),
    ("168", (209, 209, 209)),
    ("169", (132, 132, 132)),
    ("317", (108, 108, 108)),
    ("413", (86, 86, 86)),
    ("3799", (66, 66, 66)),
    ("310", (0, 0, 0)),
]


@dataclass(frozen=True)
class Palette:
    """Immutable thread palette; iteration order is the table order and breaks distance ties."""

    brand: str
    colors: Tuple[PixelColor, ...]
    codes: Tuple[str, ...]
    _lookup: Dict[PixelColor, str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if len(self.colors) != len(self.codes):
            raise ConfigurationError("Palette colors and thread codes differ in length")
        lookup = dict(zip(self.colors, self.codes))
        if len(lookup) != len(self.colors):
            raise ConfigurationError(f"Palette '{self.brand}' contains duplicate colors")
        object.__setattr__(self, "_lookup", lookup)

    @classmethod
    def from_table(cls, brand: str, table: Iterable[Tuple[str, Tuple[int, int, int]]]) -> "Palette":
        rows = list(table)
        return cls(
            brand=brand,
            colors=tuple(PixelColor(r, g, b, 255) for _code, (r, g, b) in rows),
            codes=tuple(code for code, _rgb in rows),
        )

    def __len__(self) -> int:
        return len(self.colors)

    def __contains__(self, color: object) -> bool:
        return color in self._lookup

    def thread_id(self, color: PixelColor) -> Optional[str]:
        return self._lookup.get(color)

    def rgb_array(self) -> np.ndarray:
        return np.array([c.rgb for c in self.colors], dtype=np.uint8).reshape(-1, 3)


DMC = Palette.from_table("DMC", _DMC_TABLE)

PALETTES = {"DMC": DMC}


def load_palette(brand: str = "DMC") -> Palette:
    try:
        return PALETTES[brand]
    except KeyError:
        raise ConfigurationError(f"Unknown thread palette '{brand}'") from None
